"""
Scoring sub-package

Provides the statistical analyzer, the LLM analyzer and the ensemble scorer.
"""

from truecheck_core.domain.value_objects import LLMVerdict, StatisticalResult, TextMetrics
from truecheck_core.scoring.text_metrics import (
    normalize_for_fingerprint,
    tokenize_words,
    split_sentences,
    count_paragraphs,
    extract_metrics,
)
from truecheck_core.scoring.statistical import (
    StatisticalAnalyzer,
    find_ai_phrases,
    phrase_points,
)
from truecheck_core.scoring.llm_analyzer import (
    LLMAnalyzer,
    cost_for_tokens,
    extract_json_object,
    parse_verdict,
)
from truecheck_core.scoring.ensemble import EnsembleScorer, confidence_bucket

__all__ = [
    # value objects (re-exported from domain)
    "LLMVerdict",
    "StatisticalResult",
    "TextMetrics",
    # text metrics
    "normalize_for_fingerprint",
    "tokenize_words",
    "split_sentences",
    "count_paragraphs",
    "extract_metrics",
    # statistical analyzer
    "StatisticalAnalyzer",
    "find_ai_phrases",
    "phrase_points",
    # llm analyzer
    "LLMAnalyzer",
    "cost_for_tokens",
    "extract_json_object",
    "parse_verdict",
    # ensemble
    "EnsembleScorer",
    "confidence_bucket",
]
