"""
Cache fingerprint

Deterministic key for an (input text, language, detector version) triple.
"""

from __future__ import annotations

import hashlib

from truecheck_core.scoring.text_metrics import normalize_for_fingerprint

ANALYSIS_KEY_PREFIX = "analysis"


def compute_fingerprint(text: str, language: str, version: str, key_length: int = 32) -> str:
    """
    Compute the cache key of an analysis

    The text is NFC-normalized and trimmed but not case-folded. The version is
    part of the hash, so changing it invalidates every entry.

    Args:
        text: Raw input text
        language: Language tag
        version: Detector version tag
        key_length: Number of hex digits of the SHA-256 digest to keep

    Returns:
        Key of the form "analysis:<hash>:<language>"
    """
    payload = f"{normalize_for_fingerprint(text)}:{language}:{version}"
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{ANALYSIS_KEY_PREFIX}:{digest[:key_length]}:{language}"
