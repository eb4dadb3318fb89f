"""
Domain Layer

Defines constants, entities, value objects and errors that form the core of the detector.
Has no dependencies on external libraries.
"""

from truecheck_core.domain.constants import (
    AI_PHRASES,
    DEFAULT_MODEL,
    MODEL_PRICING,
    PLAN_HOURLY_COST_LIMITS,
    PLAN_HOURLY_REQUEST_LIMITS,
    PLAN_TIERS,
    SUPPORTED_LANGUAGES,
)
from truecheck_core.domain.entities import (
    AnalysisResult,
    AnalysisRun,
    CacheEntry,
    ConsistencyResult,
    HealthReport,
)
from truecheck_core.domain.errors import (
    AnalysisError,
    BudgetExceededError,
    CacheError,
    ConfigurationError,
    DetectorError,
    LLMResponseParseError,
    ProviderError,
    ValidationError,
)
from truecheck_core.domain.value_objects import (
    Confidence,
    CostCheckResult,
    Indicator,
    LLMVerdict,
    ModelResponse,
    RateLimitResult,
    Severity,
    StatisticalResult,
    SuspiciousPart,
    TextMetrics,
)

__all__ = [
    # constants
    "AI_PHRASES",
    "DEFAULT_MODEL",
    "MODEL_PRICING",
    "PLAN_HOURLY_COST_LIMITS",
    "PLAN_HOURLY_REQUEST_LIMITS",
    "PLAN_TIERS",
    "SUPPORTED_LANGUAGES",
    # entities
    "AnalysisResult",
    "AnalysisRun",
    "CacheEntry",
    "ConsistencyResult",
    "HealthReport",
    # errors
    "AnalysisError",
    "BudgetExceededError",
    "CacheError",
    "ConfigurationError",
    "DetectorError",
    "LLMResponseParseError",
    "ProviderError",
    "ValidationError",
    # value objects
    "Confidence",
    "CostCheckResult",
    "Indicator",
    "LLMVerdict",
    "ModelResponse",
    "RateLimitResult",
    "Severity",
    "StatisticalResult",
    "SuspiciousPart",
    "TextMetrics",
]
