"""
Detector Configuration

Manages loading from environment variables, per-environment presets and validation.
An invalid configuration raises ConfigurationError at load time, never mid-request.
"""

import math
import os
from dataclasses import dataclass, field, asdict

from truecheck_core.domain.constants import (
    DEFAULT_MODEL,
    PLAN_HOURLY_COST_LIMITS,
    PLAN_HOURLY_REQUEST_LIMITS,
)
from truecheck_core.domain.errors import ConfigurationError

ENVIRONMENTS = ("development", "production")

# Tolerance for the ensemble weight sum
WEIGHT_SUM_TOLERANCE = 0.01


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int | None) -> int | None:
    """Convert an environment variable to int ("none" clears the value)"""
    val = os.environ.get(key)
    if val is None:
        return default
    if val.strip().lower() == "none":
        return None
    try:
        return int(val)
    except ValueError:
        raise ConfigurationError(
            [f"The value '{val}' of environment variable '{key}' cannot be converted to an integer."]
        )


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ConfigurationError(
            [f"The value '{val}' of environment variable '{key}' cannot be converted to a number."]
        )


def _env_str(key: str, default: str | None) -> str | None:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def provider_for_model(model_name: str) -> str:
    """Return the provider family serving a model name"""
    if model_name.startswith("claude"):
        return "anthropic"
    if model_name.startswith("gemini"):
        return "google"
    return "openai"


@dataclass
class LLMConfig:
    """LLM provider configuration"""
    model: str = DEFAULT_MODEL
    enabled: bool = True
    api_key: str | None = None
    project_id: str | None = None  # Gemini via Vertex AI
    base_url: str | None = None
    temperature: float = 0.0
    seed: int | None = 42
    max_tokens: int = 800
    timeout_seconds: float = 25.0
    max_retries: int = 1


@dataclass
class ThresholdConfig:
    """Score and input-length thresholds"""
    ai_generated: float = 65.0
    high_confidence: float = 85.0
    medium_confidence: float = 45.0
    score_difference_for_high_confidence: float = 20.0
    min_text_length: int = 10
    max_text_length: int = 15000


@dataclass(frozen=True)
class EnsembleWeights:
    """Weights of the LLM and statistical sub-scores (must sum to 1.0)"""
    llm: float = 0.6
    statistical: float = 0.4

    def __post_init__(self):
        if not (math.isfinite(self.llm) and math.isfinite(self.statistical)):
            raise ConfigurationError(
                [f"Ensemble weights must be finite, got llm={self.llm}, statistical={self.statistical}"]
            )
        if self.llm < 0 or self.statistical < 0:
            raise ConfigurationError(["Ensemble weights must be non-negative"])
        total = self.llm + self.statistical
        if not abs(total - 1.0) <= WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError([f"Ensemble weights must sum to 1.0, current sum: {total}"])


@dataclass
class StatisticalConfig:
    """Statistical analyzer thresholds"""
    vocabulary_ratio_threshold: float = 0.5
    sentence_variance_threshold: float = 100.0
    ai_phrase_threshold: int = 2
    min_words_for_vocabulary: int = 30
    min_sentences_for_variance: int = 3


@dataclass
class CacheConfig:
    """Result cache configuration"""
    enabled: bool = True
    ttl_seconds: int = 7 * 24 * 3600
    max_entries: int = 50000
    version: str = "v2.0.0"
    key_length: int = 32  # hex characters of the fingerprint digest
    backend: str = "memory"  # memory / redis
    redis_url: str | None = None
    health_ttl_seconds: int = 60
    fallback_ttl_seconds: int = 300


@dataclass
class CostConfig:
    """Daily and per-user spend limits (USD)"""
    max_daily_cost: float = 100.0
    alert_threshold: float = 80.0
    emergency_stop_threshold: float = 95.0
    plan_cost_limits: dict[str, float] = field(
        default_factory=lambda: dict(PLAN_HOURLY_COST_LIMITS)
    )
    plan_request_limits: dict[str, int] = field(
        default_factory=lambda: dict(PLAN_HOURLY_REQUEST_LIMITS)
    )


@dataclass
class MonitoringConfig:
    """Logging and performance tracking configuration"""
    log_format: str = "json"  # json / text
    log_level: str = "INFO"
    slow_request_ms: int = 5000
    log_content: bool = False  # never true in production


@dataclass
class DetectorConfig:
    """Overall detector configuration"""
    environment: str = "production"
    llm: LLMConfig = field(default_factory=LLMConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    weights: EnsembleWeights = field(default_factory=EnsembleWeights)
    statistical: StatisticalConfig = field(default_factory=StatisticalConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    cost: CostConfig = field(default_factory=CostConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def validate(self) -> None:
        """
        Check the whole configuration

        Raises:
            ConfigurationError: Listing every problem found
        """
        errors: list[str] = []

        if self.environment not in ENVIRONMENTS:
            errors.append(f"Unknown environment '{self.environment}' (available: {list(ENVIRONMENTS)})")

        total = self.weights.llm + self.weights.statistical
        if not abs(total - 1.0) <= WEIGHT_SUM_TOLERANCE:
            errors.append(f"Ensemble weights must sum to 1.0, current sum: {total}")

        t = self.thresholds
        for name in ("ai_generated", "high_confidence", "medium_confidence"):
            value = getattr(t, name)
            if not 0 <= value <= 100:
                errors.append(f"Threshold '{name}' must be between 0-100, got {value}")
        if t.min_text_length < 1 or t.min_text_length > t.max_text_length:
            errors.append(
                f"Text length bounds are invalid: min={t.min_text_length}, max={t.max_text_length}"
            )

        c = self.cost
        if c.alert_threshold > c.emergency_stop_threshold:
            errors.append("Cost alert threshold must not exceed the emergency stop threshold")
        if c.emergency_stop_threshold > c.max_daily_cost:
            errors.append("Emergency stop threshold must not exceed the maximum daily cost")

        if self.cache.max_entries < 1:
            errors.append("Cache max_entries must be at least 1")
        if self.cache.backend not in ("memory", "redis"):
            errors.append(f"Unknown cache backend '{self.cache.backend}'")
        if self.cache.backend == "redis" and not self.cache.redis_url:
            errors.append("REDIS_URL is required for the redis cache backend")

        if self.llm.max_retries < 1:
            errors.append("LLM max_retries must be at least 1")
        if self.llm.enabled:
            errors.extend(_credential_errors(self.llm))

        if errors:
            raise ConfigurationError(errors)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"detector_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "DetectorConfig":
        """Create from dictionary (handles presence/absence of detector_config key)"""
        config_data = data.get("detector_config", data)
        return cls(
            environment=config_data.get("environment", "production"),
            llm=LLMConfig(**config_data.get("llm", {})),
            thresholds=ThresholdConfig(**config_data.get("thresholds", {})),
            weights=EnsembleWeights(**config_data.get("weights", {})),
            statistical=StatisticalConfig(**config_data.get("statistical", {})),
            cache=CacheConfig(**config_data.get("cache", {})),
            cost=CostConfig(**config_data.get("cost", {})),
            monitoring=MonitoringConfig(**config_data.get("monitoring", {})),
        )


def _credential_errors(llm: LLMConfig) -> list[str]:
    provider = provider_for_model(llm.model)
    if provider == "google":
        return [] if llm.project_id else ["GCP_PROJECT_ID is required for Gemini models"]
    if provider == "anthropic":
        return [] if llm.api_key else ["ANTHROPIC_API_KEY is required for Claude models"]
    if not llm.api_key:
        return ["OPENAI_API_KEY is required for AI detection"]
    if not llm.api_key.startswith("sk-"):
        return ["OPENAI_API_KEY appears to be invalid (should start with sk-)"]
    return []


def _preset(environment: str) -> DetectorConfig:
    """Baseline values for an environment before env-var overrides"""
    if environment == "development":
        return DetectorConfig(
            environment="development",
            llm=LLMConfig(temperature=0.1, seed=None, max_tokens=500, timeout_seconds=30.0),
            thresholds=ThresholdConfig(
                ai_generated=70.0,
                high_confidence=80.0,
                medium_confidence=50.0,
                max_text_length=10000,
            ),
            cache=CacheConfig(ttl_seconds=5 * 60, max_entries=1000),
            monitoring=MonitoringConfig(log_format="text", log_level="DEBUG", log_content=True),
        )
    if environment == "production":
        return DetectorConfig(environment="production")
    raise ConfigurationError([f"Unknown environment '{environment}' (available: {list(ENVIRONMENTS)})"])


def load_config(environment: str | None = None) -> DetectorConfig:
    """
    Load configuration from environment variables

    Starts from the preset of the selected environment (DETECTOR_ENV, default production)
    and applies DETECTOR_* overrides.

    Returns:
        DetectorConfig (already validated)

    Raises:
        ConfigurationError: If any value is unparseable or the result is invalid
    """
    environment = environment or _env_str("DETECTOR_ENV", "production")
    base = _preset(environment)

    model = _env_str("DETECTOR_MODEL", base.llm.model)
    provider = provider_for_model(model)
    api_key_var = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"

    llm = LLMConfig(
        model=model,
        enabled=_env_bool("DETECTOR_LLM_ENABLED", base.llm.enabled),
        api_key=_env_str(api_key_var, base.llm.api_key),
        project_id=_env_str("GCP_PROJECT_ID", base.llm.project_id),
        base_url=_env_str("OPENAI_BASE_URL", base.llm.base_url),
        temperature=_env_float("DETECTOR_TEMPERATURE", base.llm.temperature),
        seed=_env_int("DETECTOR_SEED", base.llm.seed),
        max_tokens=_env_int("DETECTOR_MAX_TOKENS", base.llm.max_tokens),
        timeout_seconds=_env_float("DETECTOR_TIMEOUT_SECONDS", base.llm.timeout_seconds),
        max_retries=_env_int("DETECTOR_MAX_RETRIES", base.llm.max_retries),
    )
    thresholds = ThresholdConfig(
        ai_generated=_env_float("DETECTOR_AI_THRESHOLD", base.thresholds.ai_generated),
        high_confidence=_env_float("DETECTOR_HIGH_CONFIDENCE", base.thresholds.high_confidence),
        medium_confidence=_env_float("DETECTOR_MEDIUM_CONFIDENCE", base.thresholds.medium_confidence),
        score_difference_for_high_confidence=_env_float(
            "DETECTOR_SCORE_DIFFERENCE",
            base.thresholds.score_difference_for_high_confidence,
        ),
        min_text_length=_env_int("DETECTOR_MIN_TEXT_LENGTH", base.thresholds.min_text_length),
        max_text_length=_env_int("DETECTOR_MAX_TEXT_LENGTH", base.thresholds.max_text_length),
    )
    weights = EnsembleWeights(
        llm=_env_float("DETECTOR_WEIGHT_LLM", base.weights.llm),
        statistical=_env_float("DETECTOR_WEIGHT_STATISTICAL", base.weights.statistical),
    )
    statistical = StatisticalConfig(
        vocabulary_ratio_threshold=_env_float(
            "DETECTOR_VOCABULARY_RATIO_THRESHOLD", base.statistical.vocabulary_ratio_threshold
        ),
        sentence_variance_threshold=_env_float(
            "DETECTOR_SENTENCE_VARIANCE_THRESHOLD", base.statistical.sentence_variance_threshold
        ),
        ai_phrase_threshold=_env_int("DETECTOR_AI_PHRASE_THRESHOLD", base.statistical.ai_phrase_threshold),
        min_words_for_vocabulary=base.statistical.min_words_for_vocabulary,
        min_sentences_for_variance=base.statistical.min_sentences_for_variance,
    )
    cache = CacheConfig(
        enabled=_env_bool("DETECTOR_CACHE_ENABLED", base.cache.enabled),
        ttl_seconds=_env_int("DETECTOR_CACHE_TTL_SECONDS", base.cache.ttl_seconds),
        max_entries=_env_int("DETECTOR_CACHE_MAX_ENTRIES", base.cache.max_entries),
        version=_env_str("DETECTOR_CACHE_VERSION", base.cache.version),
        key_length=base.cache.key_length,
        backend=_env_str("DETECTOR_CACHE_BACKEND", base.cache.backend),
        redis_url=_env_str("REDIS_URL", base.cache.redis_url),
        health_ttl_seconds=_env_int("DETECTOR_HEALTH_TTL_SECONDS", base.cache.health_ttl_seconds),
        fallback_ttl_seconds=_env_int("DETECTOR_FALLBACK_TTL_SECONDS", base.cache.fallback_ttl_seconds),
    )
    cost = CostConfig(
        max_daily_cost=_env_float("DETECTOR_MAX_DAILY_COST", base.cost.max_daily_cost),
        alert_threshold=_env_float("DETECTOR_ALERT_THRESHOLD", base.cost.alert_threshold),
        emergency_stop_threshold=_env_float(
            "DETECTOR_EMERGENCY_STOP_THRESHOLD", base.cost.emergency_stop_threshold
        ),
    )
    monitoring = MonitoringConfig(
        log_format=_env_str("LOG_FORMAT", base.monitoring.log_format),
        log_level=_env_str("LOG_LEVEL", base.monitoring.log_level),
        slow_request_ms=_env_int("DETECTOR_SLOW_REQUEST_MS", base.monitoring.slow_request_ms),
        # Raw text never reaches production logs, whatever the env says
        log_content=(
            environment != "production"
            and _env_bool("DETECTOR_LOG_CONTENT", base.monitoring.log_content)
        ),
    )

    config = DetectorConfig(
        environment=environment,
        llm=llm,
        thresholds=thresholds,
        weights=weights,
        statistical=statistical,
        cache=cache,
        cost=cost,
        monitoring=monitoring,
    )
    config.validate()
    return config
