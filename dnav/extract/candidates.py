"""Decision candidates extracted from document pages.

This module runs one page (or one pasted document) through normalization,
quality grading, segmentation and scoring, and turns the accepted chunks
into DecisionCandidate records.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, field, fields
from typing import Any

from dnav.config import DedupConfig, QualityConfig, ScoringConfig, get_config
from dnav.extract.dedup import build_signature, extract_entities, merge_candidates
from dnav.extract.normalize import LineFrequencyCache, normalize_text
from dnav.extract.patterns import CATEGORY_BUCKETS, DEFAULT_CATEGORY, detect_category
from dnav.extract.quality import QualityAssessment, classify_quality
from dnav.extract.scoring import (
    COMMITMENT_TYPE,
    CONDITIONAL_TYPE,
    STATUS_TYPE,
    Verdict,
    score_chunk,
)
from dnav.extract.segment import segment
from dnav.utils.text import normalize_whitespace

logger = logging.getLogger(__name__)

DECISION_BUCKET = "decision"
SIGNAL_BUCKET = "signal"


@dataclass
class ReviewMetrics:
    """Reviewer-entered slider values; this pipeline never fills them."""

    impact: int | None = None
    cost: int | None = None
    risk: int | None = None
    urgency: int | None = None
    confidence: int | None = None


@dataclass
class DecisionCandidate:
    """A chunk of document text provisionally identified as a decision."""

    id: str
    doc_id: str
    doc_label: str
    page_number: int
    decision_text: str
    triggers: list[str]
    decision_score: int
    candidate_type: str
    category: str
    time_anchors: list[str]
    signature: str
    entities: list[str] = field(default_factory=list)
    bucket: str = DECISION_BUCKET
    kept: bool = False
    metrics: ReviewMetrics = field(default_factory=ReviewMetrics)
    supporting_count: int = 1

    @property
    def is_signal(self) -> bool:
        return self.bucket == SIGNAL_BUCKET

    def copy(self) -> DecisionCandidate:
        """Return an independent copy (lists and metrics included)."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the candidate for the review collaborator."""
        return asdict(self)


@dataclass
class PageExtraction:
    """Everything one page contributed."""

    page_number: int
    quality: QualityAssessment
    candidates: list[DecisionCandidate]
    chunk_count: int

    @property
    def decisions(self) -> list[DecisionCandidate]:
        return [candidate for candidate in self.candidates if not candidate.is_signal]

    @property
    def signals(self) -> list[DecisionCandidate]:
        return [candidate for candidate in self.candidates if candidate.is_signal]


def candidate_id(doc_id: str, page_number: int, chunk_index: int) -> str:
    """Build the stable id of the chunk at ``chunk_index`` on a page."""
    return f"{doc_id}-p{page_number}-c{chunk_index}"


def extract_page_candidates(
    doc_id: str,
    doc_label: str,
    page_number: int,
    raw_text: str,
    cache: LineFrequencyCache | None = None,
    repeated_line_ratio: float | None = None,
    quality_config: QualityConfig | None = None,
    scoring_config: ScoringConfig | None = None,
) -> PageExtraction:
    """Extract decision and signal candidates from one page.

    Args:
        doc_id: Owning document id.
        doc_label: Owning document label.
        page_number: 1-based page number (1 for flat text).
        raw_text: Raw page text from the page source.
        cache: Repeated-line cache of a paginated document.
        repeated_line_ratio: Header/footer threshold (default: from config).
        quality_config: Tier thresholds (default: from config).
        scoring_config: Acceptance floors and strict mode (default: from config).

    Returns:
        PageExtraction with the page's quality and its candidates.
    """
    if repeated_line_ratio is None:
        repeated_line_ratio = get_config().governor.repeated_line_ratio

    normalized = normalize_text(raw_text, cache=cache, repeated_line_ratio=repeated_line_ratio)
    quality = classify_quality(normalized.text, normalized.lines, config=quality_config)
    chunks = segment(normalized.paragraphs, drop_boilerplate=True)

    candidates: list[DecisionCandidate] = []
    for index, chunk in enumerate(chunks):
        text = normalize_whitespace(chunk)
        if not text:
            continue

        scored = score_chunk(text, tier=quality.tier, config=scoring_config)
        if scored.verdict is Verdict.REJECT:
            logger.debug(f"Rejected chunk ({scored.reason}): {text[:80]}")
            continue

        entities = extract_entities(text)
        candidates.append(
            DecisionCandidate(
                id=candidate_id(doc_id, page_number, index),
                doc_id=doc_id,
                doc_label=doc_label,
                page_number=page_number,
                decision_text=text,
                triggers=scored.triggers,
                decision_score=scored.decision_score,
                candidate_type=scored.candidate_type,
                category=detect_category(text),
                time_anchors=scored.time_anchors,
                signature=build_signature(text, entities, scored.time_anchors),
                entities=entities,
                bucket=SIGNAL_BUCKET if scored.verdict is Verdict.SIGNAL else DECISION_BUCKET,
            )
        )

    return PageExtraction(
        page_number=page_number,
        quality=quality,
        candidates=candidates,
        chunk_count=len(chunks),
    )


def sort_for_review(candidates: Iterable[DecisionCandidate]) -> list[DecisionCandidate]:
    """Order candidates by decision score, highest first.

    Ties fall back to document, page and id so the order is stable.
    """
    return sorted(
        candidates,
        key=lambda c: (-c.decision_score, c.doc_label, c.page_number, c.id),
    )

def summarize_candidates(candidates: Iterable[DecisionCandidate]) -> dict[str, Any]:
    """Count candidates by type and by category bucket.

    Every decision type and built-in category appears, with zero when unused.
    Reviewer-assigned categories and kept signals are added as they occur.

    Returns:
        Dict with ``total``, ``by_type`` and ``by_category``.
    """
    by_type = dict.fromkeys((COMMITMENT_TYPE, CONDITIONAL_TYPE, STATUS_TYPE), 0)
    by_category = dict.fromkeys([name for name, _ in CATEGORY_BUCKETS] + [DEFAULT_CATEGORY], 0)
    total = 0
    for candidate in candidates:
        total += 1
        by_type[candidate.candidate_type] = by_type.get(candidate.candidate_type, 0) + 1
        by_category[candidate.category] = by_category.get(candidate.category, 0) + 1
    return {"total": total, "by_type": by_type, "by_category": by_category}


class CandidatePool:
    """The running, de-duplicated candidate set of a processing session.

    Pages are merged in whole through ``add``; reviewer edits go through the
    ``set_*`` methods.
    """

    def __init__(
        self,
        config: DedupConfig | None = None,
        merge_across_documents: bool | None = None,
    ) -> None:
        self.config = config or get_config().dedup
        if merge_across_documents is None:
            merge_across_documents = self.config.merge_across_documents
        self.merge_across_documents = merge_across_documents
        self._items: list[DecisionCandidate] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[DecisionCandidate]:
        return iter(list(self._items))

    def add(self, incoming: Iterable[DecisionCandidate]) -> None:
        """Merge one page worth of candidates into the pool."""
        merge_candidates(
            self._items,
            incoming,
            config=self.config,
            across_documents=self.merge_across_documents,
        )

    def get(self, candidate_id: str) -> DecisionCandidate:
        """Look up a candidate by id.

        Raises:
            KeyError: If no candidate has that id.
        """
        for candidate in self._items:
            if candidate.id == candidate_id:
                return candidate
        raise KeyError(candidate_id)

    def review_list(self, include_signals: bool = False) -> list[DecisionCandidate]:
        """Candidates for the review list, best first; signals hidden by default."""
        return sort_for_review(
            c for c in self._items if include_signals or not c.is_signal
        )

    def signals(self) -> list[DecisionCandidate]:
        """Belief/outlook entries from the signal bucket, best first."""
        return sort_for_review(c for c in self._items if c.is_signal)

    def kept(self) -> list[DecisionCandidate]:
        """Reviewer-confirmed candidates, best first."""
        return sort_for_review(c for c in self._items if c.kept)

    def kept_summary(self) -> dict[str, Any]:
        """Counts of kept candidates by type and category."""
        return summarize_candidates(self.kept())

    def for_document(self, doc_id: str) -> list[DecisionCandidate]:
        return [c for c in self._items if c.doc_id == doc_id]

    def set_kept(self, candidate_id: str, kept: bool = True) -> DecisionCandidate:
        candidate = self.get(candidate_id)
        candidate.kept = kept
        return candidate

    def set_category(self, candidate_id: str, category: str) -> DecisionCandidate:
        candidate = self.get(candidate_id)
        candidate.category = category
        return candidate

    def set_metrics(self, candidate_id: str, **values: int | None) -> DecisionCandidate:
        """Update reviewer slider values.

        Raises:
            KeyError: If the candidate does not exist.
            ValueError: If a metric name is unknown.
        """
        candidate = self.get(candidate_id)
        allowed = {f.name for f in fields(ReviewMetrics)}
        unknown = set(values) - allowed
        if unknown:
            raise ValueError(f"Unknown metrics: {', '.join(sorted(unknown))}")
        for name, value in values.items():
            setattr(candidate.metrics, name, value)
        return candidate

    def clear(self) -> None:
        self._items.clear()
