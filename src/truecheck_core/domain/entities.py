"""
Domain Entities

Defines the primary data structures produced by an analysis.
"""

from dataclasses import asdict, dataclass, field

from truecheck_core.domain.value_objects import (
    Confidence,
    Indicator,
    Severity,
    SuspiciousPart,
)


@dataclass(frozen=True)
class AnalysisResult:
    """Final result of one analyze_text call"""
    ai_score: int
    confidence: Confidence
    is_ai_generated: bool
    indicators: tuple[Indicator, ...]
    explanation: str
    suspicious_parts: tuple[SuspiciousPart, ...]
    processing_time_ms: int
    word_count: int
    char_count: int
    tokens_used: int = 0
    estimated_cost_usd: float = 0.0
    cached: bool = False
    using_fallback: bool = False
    language: str = "pt"
    version: str = ""
    llm_score: int | None = None
    statistical_score: int = 0

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary"""
        data = asdict(self)
        data["confidence"] = self.confidence.value
        data["indicators"] = [
            {**ind, "severity": Severity(ind["severity"]).value}
            for ind in data["indicators"]
        ]
        data["suspicious_parts"] = list(data["suspicious_parts"])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        """Create from the dictionary produced by to_dict()"""
        values = dict(data)
        values["confidence"] = Confidence(values["confidence"])
        values["indicators"] = tuple(
            Indicator(
                type=ind["type"],
                description=ind["description"],
                severity=Severity(ind.get("severity", "medium")),
            )
            for ind in values.get("indicators", [])
        )
        values["suspicious_parts"] = tuple(
            SuspiciousPart(**part) for part in values.get("suspicious_parts", [])
        )
        return cls(**values)


@dataclass(frozen=True)
class CacheEntry:
    """Cached analysis plus bookkeeping"""
    result: AnalysisResult
    stored_at: float
    using_fallback: bool = False
    version: str = ""

    def to_dict(self) -> dict:
        return {
            "result": self.result.to_dict(),
            "stored_at": self.stored_at,
            "using_fallback": self.using_fallback,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        return cls(
            result=AnalysisResult.from_dict(data["result"]),
            stored_at=float(data["stored_at"]),
            using_fallback=bool(data.get("using_fallback", False)),
            version=data.get("version", ""),
        )


@dataclass
class HealthReport:
    """Health check result"""
    status: str  # healthy / degraded / down
    checks: dict[str, bool]
    metrics: dict = field(default_factory=dict)
    cost: dict = field(default_factory=dict)
    timestamp: str = ""
    errors: dict[str, str] = field(default_factory=dict)


@dataclass
class AnalysisRun:
    """One iteration of a consistency check (one row of the raw CSV)"""
    run_id: str
    sample_id: str
    language: str
    iteration: int
    ai_score: int | None
    confidence: str | None
    cached: bool
    using_fallback: bool
    processing_time_ms: int
    tokens_used: int
    estimated_cost_usd: float
    timestamp: str
    error: str | None = None


@dataclass
class ConsistencyResult:
    """Repeated analysis of one sample"""
    sample_id: str
    description: str
    runs: list[AnalysisRun]
    average_score: float
    score_variance: float
    max_difference: float
    is_consistent: bool
    average_processing_time_ms: float
    errors: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.is_consistent and not self.errors
