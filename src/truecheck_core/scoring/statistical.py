"""
Statistical AI-likelihood analyzer

Scores a text from lexical signals only. Deterministic and free of I/O,
so it doubles as the fallback path when the LLM is unavailable.
"""

from __future__ import annotations

import re

from truecheck_core.detector_config import StatisticalConfig
from truecheck_core.domain.constants import AI_PHRASES
from truecheck_core.domain.errors import ValidationError
from truecheck_core.domain.value_objects import (
    Indicator,
    Severity,
    StatisticalResult,
    SuspiciousPart,
    TextMetrics,
)
from truecheck_core.scoring.text_metrics import extract_metrics

# Sub-score contributions
VOCABULARY_POINTS = 25
UNIFORM_SENTENCE_POINTS = 20
POINTS_PER_PHRASE = 8
MAX_PHRASE_POINTS = 30
WORD_LENGTH_POINTS = 10
LONG_PARAGRAPH_POINTS = 10

NORMAL_WORD_LENGTH = (3.5, 6.5)
LONG_PARAGRAPH_WORDS = 150
MAX_PHRASE_PARTS = 2

_MESSAGES = {
    "en": {
        "low_vocabulary_diversity": "Low vocabulary diversity ({ratio:.1f}%)",
        "uniform_sentences": "Very uniform sentence lengths",
        "ai_phrases": "{count} AI-typical phrases found",
        "unusual_word_length": "Unusual average word length: {length:.1f}",
        "long_paragraphs": "Excessively long paragraphs",
        "phrase_reason": "Common phrase in AI-generated text",
    },
    "pt": {
        "low_vocabulary_diversity": "Baixa diversidade vocabular ({ratio:.1f}%)",
        "uniform_sentences": "Comprimento de frases muito uniforme",
        "ai_phrases": "{count} frases típicas de IA encontradas",
        "unusual_word_length": "Comprimento médio das palavras incomum: {length:.1f}",
        "long_paragraphs": "Parágrafos excessivamente longos",
        "phrase_reason": "Frase comum em textos gerados por IA",
    },
}


def _compile_phrases(phrases: list[str]) -> list[tuple[str, re.Pattern]]:
    return [
        (phrase, re.compile(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)"))
        for phrase in phrases
    ]


_PHRASE_PATTERNS = {lang: _compile_phrases(phrases) for lang, phrases in AI_PHRASES.items()}


def find_ai_phrases(text: str, language: str) -> list[str]:
    """
    Return the AI-typical phrases present in the text (case-insensitive, word-bounded)

    Raises:
        ValidationError: If the language has no phrase list
    """
    patterns = _PHRASE_PATTERNS.get(language)
    if patterns is None:
        raise ValidationError(f"Unsupported language: {language}")
    lowered = text.lower()
    return [phrase for phrase, pattern in patterns if pattern.search(lowered)]


def strip_ai_phrases(words: list[str] | tuple[str, ...], language: str) -> list[str]:
    """Words left after removing every AI-typical phrase occurrence"""
    text = " ".join(words)
    for _, pattern in _PHRASE_PATTERNS.get(language, []):
        text = pattern.sub(" ", text)
    return text.split()


def phrase_points(hits: int, threshold: int) -> int:
    """Sub-score contribution of AI-phrase hits (non-decreasing in hits)"""
    if hits <= threshold:
        return 0
    return min(hits * POINTS_PER_PHRASE, MAX_PHRASE_POINTS)


class StatisticalAnalyzer:
    """Lexical analyzer producing a 0-100 sub-score"""

    def __init__(self, config: StatisticalConfig | None = None) -> None:
        self.config = config or StatisticalConfig()

    def analyze(self, text: str, language: str) -> StatisticalResult:
        """
        Score a text from vocabulary ratio, sentence-length variance and AI phrases

        The caller is responsible for the length gate; very short texts
        simply trigger no signals.

        Args:
            text: Input text
            language: "pt" or "en"

        Returns:
            StatisticalResult (score, signals, indicators, suspicious parts, metrics)
        """
        if language not in _MESSAGES:
            raise ValidationError(f"Unsupported language: {language}")

        cfg = self.config
        msg = _MESSAGES[language]
        metrics = extract_metrics(text)

        score = 0
        indicators: list[Indicator] = []
        suspicious_parts: list[SuspiciousPart] = []

        if (
            metrics.word_count > cfg.min_words_for_vocabulary
            and metrics.vocabulary_ratio < cfg.vocabulary_ratio_threshold
        ):
            score += VOCABULARY_POINTS
            indicators.append(Indicator(
                type="low_vocabulary_diversity",
                description=msg["low_vocabulary_diversity"].format(ratio=metrics.vocabulary_ratio * 100),
                severity=Severity.HIGH,
            ))

        if (
            metrics.sentence_count > cfg.min_sentences_for_variance
            and metrics.sentence_variance < cfg.sentence_variance_threshold
        ):
            score += UNIFORM_SENTENCE_POINTS
            indicators.append(Indicator(
                type="uniform_sentences",
                description=msg["uniform_sentences"],
                severity=Severity.MEDIUM,
            ))

        found = find_ai_phrases(" ".join(metrics.words), language)
        points = phrase_points(len(found), cfg.ai_phrase_threshold)
        if points:
            score += points
            indicators.append(Indicator(
                type="ai_phrases",
                description=msg["ai_phrases"].format(count=len(found)),
                severity=Severity.HIGH if len(found) > 4 else Severity.MEDIUM,
            ))
            for phrase in found[:MAX_PHRASE_PARTS]:
                suspicious_parts.append(SuspiciousPart(
                    text=phrase,
                    score=min(100, 70 + len(found) * 3),
                    reason=msg["phrase_reason"],
                ))

        # Measured on the words outside AI phrases so that extra phrases never
        # move the average out of (or into) the normal band.
        content_words = strip_ai_phrases(metrics.words, language)
        avg_word_length = (
            sum(len(w) for w in content_words) / len(content_words) if content_words else 0.0
        )
        low, high = NORMAL_WORD_LENGTH
        if content_words and not low <= avg_word_length <= high:
            score += WORD_LENGTH_POINTS
            indicators.append(Indicator(
                type="unusual_word_length",
                description=msg["unusual_word_length"].format(length=avg_word_length),
                severity=Severity.LOW,
            ))

        if _avg_paragraph_words(metrics) > LONG_PARAGRAPH_WORDS:
            score += LONG_PARAGRAPH_POINTS
            indicators.append(Indicator(
                type="long_paragraphs",
                description=msg["long_paragraphs"],
                severity=Severity.MEDIUM,
            ))

        signals = {
            "vocabulary_ratio": round(metrics.vocabulary_ratio, 4),
            "sentence_variance": round(metrics.sentence_variance, 2),
            "ai_phrase_hits": len(found),
            "ai_phrases": found,
            "avg_word_length": round(avg_word_length, 2),
            "sentence_count": metrics.sentence_count,
            "paragraph_count": metrics.paragraph_count,
        }

        return StatisticalResult(
            score=min(score, 100),
            signals=signals,
            indicators=tuple(indicators),
            suspicious_parts=tuple(suspicious_parts),
            metrics=metrics,
        )


def _avg_paragraph_words(metrics: TextMetrics) -> float:
    return metrics.word_count / max(metrics.paragraph_count, 1)
