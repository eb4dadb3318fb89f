"""
Domain Value Objects

Defines immutable data structures representing values such as model responses,
text metrics, partial analysis results, and budget decisions.
"""

from dataclasses import dataclass, field
from enum import Enum


class Confidence(str, Enum):
    """Coarse trust bucket of a final score"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Severity(str, Enum):
    """Weight of a single indicator"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Indicator:
    """A textual observation that contributed to the score"""
    type: str
    description: str
    severity: Severity = Severity.MEDIUM


@dataclass(frozen=True)
class SuspiciousPart:
    """A span of the input that looks generated"""
    text: str
    score: int
    reason: str


@dataclass
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class TextMetrics:
    """Lexical measurements of a text"""
    word_count: int
    char_count: int
    sentences: tuple[str, ...]
    words: tuple[str, ...]
    unique_word_count: int
    paragraph_count: int
    avg_word_length: float
    avg_sentence_length: float
    vocabulary_ratio: float
    sentence_variance: float

    @property
    def sentence_count(self) -> int:
        return len(self.sentences)


@dataclass(frozen=True)
class StatisticalResult:
    """Output of the statistical analyzer"""
    score: int
    signals: dict = field(default_factory=dict)
    indicators: tuple[Indicator, ...] = ()
    suspicious_parts: tuple[SuspiciousPart, ...] = ()
    metrics: TextMetrics | None = None


@dataclass(frozen=True)
class LLMVerdict:
    """Parsed verdict returned by the LLM analyzer"""
    score: int
    confidence: Confidence
    explanation: str
    indicators: tuple[str, ...] = ()
    suspicious_parts: tuple[SuspiciousPart, ...] = ()
    tokens_used: int = 0
    estimated_cost_usd: float = 0.0
    model_name: str = ""


@dataclass(frozen=True)
class CostCheckResult:
    """Per-user cost budget decision"""
    allowed: bool
    remaining_cost: float


@dataclass(frozen=True)
class RateLimitResult:
    """Per-user request budget decision"""
    allowed: bool
    remaining: int
    reset_at: float
    limit: int
