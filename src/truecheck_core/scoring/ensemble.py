"""
Ensemble scorer

Combines the LLM verdict and the statistical sub-score into the final
AnalysisResult.
"""

from __future__ import annotations

import math

from truecheck_core.detector_config import EnsembleWeights, ThresholdConfig
from truecheck_core.domain.entities import AnalysisResult
from truecheck_core.domain.value_objects import (
    Confidence,
    Indicator,
    LLMVerdict,
    Severity,
    StatisticalResult,
)

MAX_SUSPICIOUS_PARTS = 5


def round_score(value: float) -> int:
    """Round half up (scores are never negative)"""
    return int(math.floor(value + 0.5))


def confidence_bucket(
    llm_score: int,
    statistical_score: int,
    combined: float,
    thresholds: ThresholdConfig,
) -> Confidence:
    """
    Confidence of a combined score

    HIGH when both methods agree within the configured delta and the LLM is
    above the high-confidence threshold; MEDIUM when the combined score is above
    the medium threshold; LOW otherwise.
    """
    difference = abs(llm_score - statistical_score)
    if difference < thresholds.score_difference_for_high_confidence and llm_score > thresholds.high_confidence:
        return Confidence.HIGH
    if combined > thresholds.medium_confidence:
        return Confidence.MEDIUM
    return Confidence.LOW


class EnsembleScorer:
    """Weighted combination of the LLM and statistical paths"""

    def __init__(
        self,
        weights: EnsembleWeights | None = None,
        thresholds: ThresholdConfig | None = None,
    ) -> None:
        self.weights = weights or EnsembleWeights()
        self.thresholds = thresholds or ThresholdConfig()

    def combine(
        self,
        llm_verdict: LLMVerdict | None,
        statistical: StatisticalResult,
        *,
        language: str = "pt",
        weights: EnsembleWeights | None = None,
        processing_time_ms: int = 0,
        version: str = "",
    ) -> AnalysisResult:
        """
        Build the final result

        Args:
            llm_verdict: Verdict of the LLM path, or None if it was skipped or failed
            statistical: Statistical result (always present)
            language: Language of the explanation
            weights: Override of the configured weights
            processing_time_ms: Elapsed time so far
            version: Detector version tag

        Returns:
            AnalysisResult
        """
        weights = weights or self.weights
        using_fallback = llm_verdict is None

        if using_fallback:
            final = float(statistical.score)
            confidence = Confidence.LOW
        else:
            final = llm_verdict.score * weights.llm + statistical.score * weights.statistical
            confidence = confidence_bucket(llm_verdict.score, statistical.score, final, self.thresholds)

        ai_score = min(100, max(0, round_score(final)))

        indicators = list(statistical.indicators)
        suspicious_parts = list(statistical.suspicious_parts)
        if llm_verdict is not None:
            for pattern in llm_verdict.indicators:
                indicators.append(Indicator(
                    type="ai_pattern",
                    description=(f"Padrão detectado: {pattern}" if language == "pt"
                                 else f"Pattern detected: {pattern}"),
                    severity=Severity.MEDIUM,
                ))
            suspicious_parts.extend(llm_verdict.suspicious_parts)

        metrics = statistical.metrics
        return AnalysisResult(
            ai_score=ai_score,
            confidence=confidence,
            is_ai_generated=ai_score >= self.thresholds.ai_generated,
            indicators=tuple(indicators),
            explanation=self._explain(ai_score, llm_verdict, statistical, language),
            suspicious_parts=tuple(suspicious_parts[:MAX_SUSPICIOUS_PARTS]),
            processing_time_ms=processing_time_ms,
            word_count=metrics.word_count if metrics else 0,
            char_count=metrics.char_count if metrics else 0,
            tokens_used=llm_verdict.tokens_used if llm_verdict else 0,
            estimated_cost_usd=llm_verdict.estimated_cost_usd if llm_verdict else 0.0,
            using_fallback=using_fallback,
            language=language,
            version=version,
            llm_score=llm_verdict.score if llm_verdict else None,
            statistical_score=statistical.score,
        )

    @staticmethod
    def _explain(
        ai_score: int,
        llm_verdict: LLMVerdict | None,
        statistical: StatisticalResult,
        language: str,
    ) -> str:
        metrics = statistical.metrics
        word_count = metrics.word_count if metrics else 0
        diversity = (metrics.vocabulary_ratio * 100) if metrics else 0.0

        if language == "pt":
            parts = [f"Pontuação de IA: {ai_score}%."]
            if llm_verdict is None:
                parts.append("Análise baseada em métodos estatísticos (serviço principal indisponível).")
            else:
                parts.append(llm_verdict.explanation)
                agreement = 100 - abs(llm_verdict.score - statistical.score)
                parts.append(f"Concordância entre métodos: {agreement}%.")
            parts.append(f"Texto: {word_count} palavras, diversidade vocabular {diversity:.1f}%.")
        else:
            parts = [f"AI Score: {ai_score}%."]
            if llm_verdict is None:
                parts.append("Analysis based on statistical methods (primary service unavailable).")
            else:
                parts.append(llm_verdict.explanation)
                agreement = 100 - abs(llm_verdict.score - statistical.score)
                parts.append(f"Method agreement: {agreement}%.")
            parts.append(f"Text: {word_count} words, vocabulary diversity {diversity:.1f}%.")
        return " ".join(parts)
