"""Extractability grading for pages and documents."""

from __future__ import annotations

from dataclasses import dataclass

from dnav.config import QualityConfig, get_config

TIER_ORDER = {"A": 0, "B": 1, "C": 2}

REASONS = {
    "A": "Clean continuous text detected.",
    "B": "Layout-heavy text detected (multi-column or dense formatting).",
    "C": "Very little extractable text detected (likely scan or image-heavy).",
}


@dataclass(frozen=True)
class QualityAssessment:
    """Quality tier with a human-readable reason."""

    tier: str
    reason: str


def classify_quality(
    text: str,
    lines: list[str],
    config: QualityConfig | None = None,
) -> QualityAssessment:
    """Grade how cleanly text was extracted.

    Args:
        text: Normalized text.
        lines: Source lines the text was built from.
        config: Thresholds (default: from config).

    Returns:
        Tier C for near-empty text, B for layout-heavy text, otherwise A.
    """
    config = config or get_config().quality

    char_count = sum(1 for ch in text if not ch.isspace())
    token_count = len(text.split())
    if char_count < config.min_chars or token_count < config.min_tokens:
        return QualityAssessment(tier="C", reason=REASONS["C"])

    non_empty = [line for line in lines if line.strip()]
    average_line_length = (
        sum(len(line) for line in non_empty) / len(non_empty) if non_empty else 0.0
    )
    newline_density = len(non_empty) / max(len(text), 1)
    if (
        average_line_length < config.min_avg_line_length
        or newline_density > config.max_newline_density
    ):
        return QualityAssessment(tier="B", reason=REASONS["B"])

    return QualityAssessment(tier="A", reason=REASONS["A"])


def worst_tier(first: QualityAssessment | None, second: QualityAssessment) -> QualityAssessment:
    """Return whichever assessment has the lower extractability."""
    if first is None or TIER_ORDER[second.tier] > TIER_ORDER[first.tier]:
        return second
    return first
