"""Extract module: turns page text into scored, de-duplicated decision candidates."""

from dnav.extract.candidates import (
    CandidatePool,
    DecisionCandidate,
    PageExtraction,
    ReviewMetrics,
    extract_page_candidates,
    summarize_candidates,
)
from dnav.extract.dedup import deduplicate, merge_candidates
from dnav.extract.normalize import LineFrequencyCache, normalize_text
from dnav.extract.quality import QualityAssessment, classify_quality
from dnav.extract.scoring import SignalScore, Verdict, score_chunk
from dnav.extract.segment import segment

__all__ = [
    "CandidatePool",
    "DecisionCandidate",
    "LineFrequencyCache",
    "PageExtraction",
    "QualityAssessment",
    "ReviewMetrics",
    "SignalScore",
    "Verdict",
    "classify_quality",
    "deduplicate",
    "extract_page_candidates",
    "merge_candidates",
    "normalize_text",
    "score_chunk",
    "segment",
    "summarize_candidates",
]
