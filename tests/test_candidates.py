"""Tests for page extraction and the candidate pool."""

import pytest

from conftest import CASH_FLOW_TABLE, COMMITMENT_SENTENCE, DISCLAIMER
from dnav.extract.candidates import (
    CandidatePool,
    extract_page_candidates,
    sort_for_review,
    summarize_candidates,
)
from dnav.extract.normalize import LineFrequencyCache


class TestExtractPageCandidates:
    """Tests for the per-page pipeline."""

    def test_commitment_sentence(self) -> None:
        extraction = extract_page_candidates("doc-1", "Shareholder letter", 1, COMMITMENT_SENTENCE)

        assert extraction.quality.tier == "C"
        assert len(extraction.candidates) == 1
        candidate = extraction.candidates[0]
        assert candidate.id == "doc-1-p1-c0"
        assert candidate.doc_label == "Shareholder letter"
        assert candidate.candidate_type == "Commitment"
        assert candidate.time_anchors == ["q1 2025"]
        assert candidate.decision_score >= 60
        assert candidate.category == "Capex"
        assert candidate.entities == ["Megafactory Shanghai"]
        assert candidate.supporting_count == 1
        assert not candidate.kept

    def test_table_row_yields_nothing(self) -> None:
        extraction = extract_page_candidates("doc-1", "10-K", 1, CASH_FLOW_TABLE)
        assert extraction.candidates == []

    def test_disclaimer_yields_nothing(self) -> None:
        extraction = extract_page_candidates("doc-1", "Deck", 1, DISCLAIMER)
        assert extraction.candidates == []

    def test_belief_goes_to_signals(self) -> None:
        text = "We expect demand to remain strong."
        extraction = extract_page_candidates("doc-1", "Memo", 1, text)
        assert extraction.decisions == []
        assert len(extraction.signals) == 1
        assert extraction.signals[0].candidate_type == "BeliefOutlook"

    def test_clause_list_yields_one_candidate_per_clause(self) -> None:
        text = "We will launch the new app, expand the delivery fleet, and reduce warehouse costs."
        extraction = extract_page_candidates("doc-1", "Memo", 3, text)

        assert [c.decision_text for c in extraction.candidates] == [
            "We will launch the new app",
            "expand the delivery fleet",
            "reduce warehouse costs.",
        ]
        assert [c.id for c in extraction.candidates] == [
            "doc-1-p3-c0",
            "doc-1-p3-c1",
            "doc-1-p3-c2",
        ]

    def test_empty_page(self) -> None:
        extraction = extract_page_candidates("doc-1", "Scan", 1, "")
        assert extraction.candidates == []
        assert extraction.chunk_count == 0
        assert extraction.quality.tier == "C"

    def test_uses_repeated_line_cache(self) -> None:
        cache = LineFrequencyCache()
        page = f"Quarterly letter\n\n{COMMITMENT_SENTENCE}"
        extract_page_candidates("doc-1", "Letter", 1, page, cache=cache)
        extract_page_candidates("doc-1", "Letter", 2, page, cache=cache)
        assert cache.pages_seen == 2
        assert cache.is_repeated("Quarterly letter")


def _pool_with(*pages: tuple[int, str]) -> CandidatePool:
    pool = CandidatePool()
    for number, text in pages:
        pool.add(extract_page_candidates("doc-1", "Memo", number, text).candidates)
    return pool


class TestCandidatePool:
    """Tests for the running candidate set and reviewer edits."""

    def test_review_list_is_sorted_and_hides_signals(self) -> None:
        pool = _pool_with(
            (1, "We will add a second shift."),
            (2, COMMITMENT_SENTENCE),
            (3, "We expect demand to remain strong."),
        )

        review = pool.review_list()
        assert [c.decision_score for c in review] == sorted(
            (c.decision_score for c in review), reverse=True
        )
        assert all(not c.is_signal for c in review)
        assert len(pool.review_list(include_signals=True)) == 3
        assert len(pool.signals()) == 1

    def test_repeated_page_merges(self) -> None:
        pool = _pool_with((1, COMMITMENT_SENTENCE), (2, COMMITMENT_SENTENCE))
        assert len(pool) == 1
        assert next(iter(pool)).supporting_count == 2

    def test_reviewer_edits(self) -> None:
        pool = _pool_with((1, COMMITMENT_SENTENCE))
        candidate_id = "doc-1-p1-c0"

        pool.set_kept(candidate_id)
        pool.set_category(candidate_id, "Ops")
        pool.set_metrics(candidate_id, impact=8, risk=3)

        candidate = pool.get(candidate_id)
        assert candidate.kept
        assert candidate.category == "Ops"
        assert candidate.metrics.impact == 8
        assert candidate.metrics.risk == 3
        assert candidate.metrics.cost is None
        assert pool.kept() == [candidate]

    def test_unknown_candidate(self) -> None:
        pool = CandidatePool()
        with pytest.raises(KeyError):
            pool.set_kept("missing")

    def test_unknown_metric(self) -> None:
        pool = _pool_with((1, COMMITMENT_SENTENCE))
        with pytest.raises(ValueError, match="Unknown metrics"):
            pool.set_metrics("doc-1-p1-c0", reach=3)

    def test_for_document_and_clear(self) -> None:
        pool = _pool_with((1, COMMITMENT_SENTENCE))
        assert len(pool.for_document("doc-1")) == 1
        assert pool.for_document("doc-2") == []
        pool.clear()
        assert len(pool) == 0

    def test_sort_ties_are_stable(self) -> None:
        pool = _pool_with((2, "We will add a second shift."), (1, "We will close the old depot."))
        ordered = sort_for_review(pool)
        assert [c.page_number for c in ordered] == [1, 2]

    def test_kept_summary(self) -> None:
        pool = _pool_with(
            (1, COMMITMENT_SENTENCE),
            (2, "We will add a second shift when demand recovers."),
            (3, "We will close the old depot."),
        )
        pool.set_kept("doc-1-p1-c0")
        pool.set_kept("doc-1-p2-c0")

        summary = pool.kept_summary()

        assert summary["total"] == 2
        assert summary["by_type"] == {"Commitment": 1, "Conditional": 1, "Status": 0}
        assert summary["by_category"]["Capex"] == 1
        assert sum(summary["by_category"].values()) == 2

    def test_summary_of_nothing_lists_every_bucket(self) -> None:
        summary = summarize_candidates([])
        assert summary["total"] == 0
        assert set(summary["by_category"]) == {"Product", "Capex", "Platform", "Ops", "Other"}
        assert all(count == 0 for count in summary["by_type"].values())

    def test_summary_counts_reviewer_categories(self) -> None:
        pool = _pool_with((1, COMMITMENT_SENTENCE))
        pool.set_kept("doc-1-p1-c0")
        pool.set_category("doc-1-p1-c0", "Hiring")

        summary = pool.kept_summary()
        assert summary["by_category"]["Hiring"] == 1
        assert summary["by_category"]["Capex"] == 0
