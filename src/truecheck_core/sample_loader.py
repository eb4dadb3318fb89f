"""
Sample Loader

Loads consistency-check sample packs from JSON files.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from truecheck_core.domain.constants import SUPPORTED_LANGUAGES


@dataclass
class ExpectedRange:
    """Score range a sample is expected to land in"""
    min: int
    max: int

    def __post_init__(self):
        if not 0 <= self.min <= self.max <= 100:
            raise ValueError(f"Invalid expected range: {self.min}-{self.max}")

    def contains(self, score: float) -> bool:
        return self.min <= score <= self.max


@dataclass
class Sample:
    """Text analysed repeatedly by the consistency check"""
    sample_id: str
    text: str
    language: str
    description: str = ""
    expected_range: ExpectedRange | None = None

    def __post_init__(self):
        """Post-initialization validation"""
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Invalid language: {self.language}. Valid values: {list(SUPPORTED_LANGUAGES)}"
            )


@dataclass
class SamplePack:
    """Sample pack definition"""
    pack_id: str
    pack_name: str
    samples: list[Sample]
    description: str = ""
    version: str = "1.0"


def _parse_sample(data: dict) -> Sample:
    expected = data.get("expected_range")
    return Sample(
        sample_id=data["id"],
        text=data["text"],
        language=data["language"],
        description=data.get("description", ""),
        expected_range=ExpectedRange(min=expected["min"], max=expected["max"]) if expected else None,
    )


def load_sample_pack(file_path: str | Path) -> SamplePack:
    """
    Load a sample pack JSON

    Args:
        file_path: Path to the sample pack JSON file

    Returns:
        SamplePack: Sample pack object

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If a required field is missing
        ValueError: If a sample has an invalid language or expected range,
            or sample ids are duplicated
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Validate required fields
    for field in ("pack_id", "pack_name", "samples"):
        if field not in data:
            raise KeyError(f"Required field '{field}' is missing: {file_path}")

    samples = []
    for sample_data in data["samples"]:
        for field in ("id", "text", "language"):
            if field not in sample_data:
                raise KeyError(f"Required sample field '{field}' is missing: {file_path}")
        samples.append(_parse_sample(sample_data))

    ids = [s.sample_id for s in samples]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate sample ids in {file_path}: {duplicates}")

    return SamplePack(
        pack_id=data["pack_id"],
        pack_name=data["pack_name"],
        samples=samples,
        description=data.get("description", ""),
        version=data.get("version", "1.0"),
    )
