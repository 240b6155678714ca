"""Deduplication of decision candidates.

Candidates are matched first by a compact signature
(``entity|timeAnchor|tokenPrefix``) and then by token-set overlap. A merge
keeps the wording of the higher-scoring side and counts the other as
supporting evidence.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from dnav.config import DedupConfig, get_config
from dnav.extract.patterns import KNOWN_ACRONYMS, STOP_WORDS

if TYPE_CHECKING:
    from dnav.extract.candidates import DecisionCandidate

_CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][a-zA-Z0-9&-]{2,}(?:\s+[A-Z][a-zA-Z0-9&-]{2,})+")
_ACRONYM = re.compile(r"\b(?:" + "|".join(KNOWN_ACRONYMS) + r")\b")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")

SIGNATURE_PREFIX_TOKENS = 6


def extract_entities(text: str) -> list[str]:
    """Find capitalized multi-word phrases and known acronyms, in text order."""
    found: list[tuple[int, str]] = []
    for pattern in (_CAPITALIZED_PHRASE, _ACRONYM):
        found.extend((match.start(), match.group(0).strip()) for match in pattern.finditer(text))
    entities: list[str] = []
    for _, entity in sorted(found):
        if entity not in entities:
            entities.append(entity)
    return entities


def signature_tokens(text: str) -> list[str]:
    """Lower-case alphanumeric tokens of text without stop words."""
    cleaned = _NON_ALNUM.sub(" ", text.lower())
    return [token for token in cleaned.split() if token not in STOP_WORDS]


def build_signature(text: str, entities: list[str], time_anchors: list[str]) -> str:
    """Build the ``entity|timeAnchor|tokenPrefix`` duplicate lookup key.

    Args:
        text: Candidate text.
        entities: Entities found in the text.
        time_anchors: Time anchors found in the text.

    Returns:
        Signature string; empty parts stay empty.
    """
    entity = entities[0].lower() if entities else ""
    anchor = time_anchors[0].lower() if time_anchors else ""
    prefix = "-".join(signature_tokens(text)[:SIGNATURE_PREFIX_TOKENS])
    return f"{entity}|{anchor}|{prefix}"


def token_overlap(a: str, b: str) -> float:
    """Jaccard overlap of the stop-word-filtered token sets of two texts."""
    set_a = set(signature_tokens(a))
    set_b = set(signature_tokens(b))
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def is_duplicate(
    existing: DecisionCandidate,
    incoming: DecisionCandidate,
    threshold: float,
    across_documents: bool,
) -> bool:
    """Check if two candidates describe the same statement."""
    if existing.bucket != incoming.bucket:
        return False
    if not across_documents and existing.doc_id != incoming.doc_id:
        return False
    if existing.signature == incoming.signature:
        return True
    return token_overlap(existing.decision_text, incoming.decision_text) > threshold


def absorb(survivor: DecisionCandidate, other: DecisionCandidate) -> bool:
    """Merge other into survivor.

    The strictly higher-scoring side supplies the wording and everything
    derived from it; on a tie the survivor keeps its own.

    Returns:
        True if the survivor's text changed.
    """
    survivor.supporting_count += other.supporting_count
    if other.decision_score <= survivor.decision_score:
        return False

    survivor.decision_text = other.decision_text
    survivor.decision_score = other.decision_score
    survivor.triggers = list(other.triggers)
    survivor.page_number = other.page_number
    survivor.category = other.category
    survivor.candidate_type = other.candidate_type
    survivor.time_anchors = list(other.time_anchors)
    survivor.entities = list(other.entities)
    survivor.signature = other.signature
    return True


def merge_candidates(
    existing: list[DecisionCandidate],
    incoming: Iterable[DecisionCandidate],
    config: DedupConfig | None = None,
    across_documents: bool | None = None,
) -> list[DecisionCandidate]:
    """Fold new candidates into a running candidate list.

    ``existing`` is updated in place and also returned. A candidate whose id
    is already present is ignored, so re-delivering a page is harmless. When a
    merge changes a survivor's wording, the survivor is re-checked against
    the rest of the list until no two entries match.

    Args:
        existing: Running candidate list (already free of duplicates).
        incoming: Newly scored candidates.
        config: Dedup config (default: from config).
        across_documents: Override for cross-document merging.

    Returns:
        The updated running list.
    """
    config = config or get_config().dedup
    threshold = config.similarity_threshold
    across = config.merge_across_documents if across_documents is None else across_documents
    known_ids = {candidate.id for candidate in existing}

    for candidate in incoming:
        if candidate.id in known_ids:
            continue

        match = next(
            (item for item in existing if is_duplicate(item, candidate, threshold, across)),
            None,
        )
        if match is None:
            existing.append(candidate)
            known_ids.add(candidate.id)
            continue

        if absorb(match, candidate):
            _collapse_into(match, existing, threshold, across)

    return existing


def _collapse_into(
    survivor: DecisionCandidate,
    items: list[DecisionCandidate],
    threshold: float,
    across_documents: bool,
) -> None:
    """Absorb every other list entry that now duplicates the survivor."""
    while True:
        other = next(
            (
                item
                for item in items
                if item is not survivor
                and is_duplicate(survivor, item, threshold, across_documents)
            ),
            None,
        )
        if other is None:
            return
        items[:] = [item for item in items if item is not other]
        absorb(survivor, other)


def deduplicate(
    candidates: Iterable[DecisionCandidate],
    config: DedupConfig | None = None,
    across_documents: bool | None = None,
) -> list[DecisionCandidate]:
    """Collapse a candidate set into distinct statements.

    Inputs are copied, so the caller's objects are never modified. Running
    the result through again returns an equal list.
    """
    return merge_candidates(
        [],
        (candidate.copy() for candidate in candidates),
        config=config,
        across_documents=across_documents,
    )
