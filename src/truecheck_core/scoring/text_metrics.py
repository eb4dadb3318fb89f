"""
Text normalization and lexical metrics

Pure functions: no I/O, no randomness. Shared by the statistical analyzer
and the cache fingerprint.
"""

from __future__ import annotations

import re
import unicodedata

from truecheck_core.domain.value_objects import TextMetrics

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_WORD_STRIP_RE = re.compile(r"^[^\w]+|[^\w]+$")


def normalize_for_fingerprint(text: str) -> str:
    """
    Normalize text for cache keys

    Only NFC normalization and trimming are applied. Case and inner
    whitespace are preserved: two texts differing only in case are
    different inputs and may be scored differently.
    """
    return unicodedata.normalize("NFC", text).strip()


def tokenize_words(text: str) -> list[str]:
    """
    Split text into lowercase words

    Surrounding punctuation is stripped from each token; tokens made only of
    punctuation are dropped.
    """
    words = []
    for raw in text.lower().split():
        word = _WORD_STRIP_RE.sub("", raw)
        if word:
            words.append(word)
    return words


def split_sentences(text: str) -> list[str]:
    """Split text into non-empty, stripped sentences"""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def count_paragraphs(text: str) -> int:
    """Number of blank-line separated paragraphs (at least 1 for non-empty text)"""
    paragraphs = [p for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]
    return max(len(paragraphs), 1) if text.strip() else 0


def extract_metrics(text: str) -> TextMetrics:
    """
    Compute lexical metrics

    Args:
        text: Raw input text

    Returns:
        TextMetrics (sentence variance is the population variance of
        sentence lengths in characters)
    """
    words = tokenize_words(text)
    sentences = split_sentences(text)

    word_count = len(words)
    unique_word_count = len(set(words))
    avg_word_length = sum(len(w) for w in words) / word_count if word_count else 0.0

    lengths = [len(s) for s in sentences]
    if lengths:
        avg_sentence_length = sum(lengths) / len(lengths)
        sentence_variance = sum((n - avg_sentence_length) ** 2 for n in lengths) / len(lengths)
    else:
        avg_sentence_length = 0.0
        sentence_variance = 0.0

    return TextMetrics(
        word_count=word_count,
        char_count=len(text),
        sentences=tuple(sentences),
        words=tuple(words),
        unique_word_count=unique_word_count,
        paragraph_count=count_paragraphs(text),
        avg_word_length=avg_word_length,
        avg_sentence_length=avg_sentence_length,
        vocabulary_ratio=unique_word_count / word_count if word_count else 0.0,
        sentence_variance=sentence_variance,
    )
