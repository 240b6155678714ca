"""Heuristic multi-signal scoring of candidate chunks.

Each chunk is checked against the lexical families in
``dnav.extract.patterns`` and a few structural heuristics (digit density,
year tokens, ALL-CAPS share). The additive score and the family flags then
decide one of three outcomes:

- ``accept``: a decision candidate for the primary review list.
- ``signal``: belief/outlook language, kept in the hidden signal bucket.
- ``reject``: noise, boilerplate, or text without any decision verb.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dnav.config import ScoringConfig, get_config
from dnav.extract.patterns import (
    BELIEF,
    BOILERPLATE,
    COMMITMENT,
    CONDITIONAL,
    CONSTRAINT,
    DIRECTION,
    HEADING_CAPS_RATIO,
    HEADING_MAX_WORDS,
    MAX_DIGIT_RATIO,
    MAX_YEAR_TOKENS,
    PENALTIES,
    RESOURCE,
    SIGNAL_FAMILIES,
    STRICT_CONDITIONAL_WEIGHT,
    STRICT_MIN_SCORE,
    TABLE_NOISE,
    TIME_ANCHOR_TRIGGER,
    TRADEOFF,
    UPPERCASE_MAX_WORDS,
    WEIGHTS,
    YEAR_TOKEN_PATTERN,
    find_time_anchors,
)

BELIEF_OUTLOOK = "BeliefOutlook"
CONDITIONAL_TYPE = "Conditional"
COMMITMENT_TYPE = "Commitment"
STATUS_TYPE = "Status"


class Verdict(str, Enum):
    """What the pipeline does with a scored chunk."""

    ACCEPT = "accept"
    SIGNAL = "signal"
    REJECT = "reject"


@dataclass
class StructureStats:
    """Structural features of a chunk used for table and heading detection."""

    word_count: int
    digit_ratio: float
    year_tokens: int
    caps_ratio: float
    all_upper: bool

    @property
    def is_table_like(self) -> bool:
        return self.digit_ratio > MAX_DIGIT_RATIO or self.year_tokens >= MAX_YEAR_TOKENS

    @property
    def is_heading_like(self) -> bool:
        if self.caps_ratio > HEADING_CAPS_RATIO and self.word_count <= HEADING_MAX_WORDS:
            return True
        return self.all_upper and self.word_count <= UPPERCASE_MAX_WORDS


@dataclass
class SignalScore:
    """Transient scoring result for one chunk."""

    text: str
    has_commitment: bool
    has_direction: bool
    has_constraint: bool
    has_resource: bool
    has_tradeoff: bool
    has_conditional: bool
    has_belief: bool
    has_table_noise: bool
    is_boilerplate: bool
    structure: StructureStats
    time_anchors: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    decision_score: int = 0
    candidate_type: str = STATUS_TYPE
    verdict: Verdict = Verdict.REJECT
    reason: str = ""

    @property
    def has_time_anchor(self) -> bool:
        return bool(self.time_anchors)

    @property
    def has_required_verb(self) -> bool:
        """Commitment, direction or constraint language is present."""
        return self.has_commitment or self.has_direction or self.has_constraint

    @property
    def belief_penalty(self) -> bool:
        """Belief language without commitment, resource or time anchor."""
        return self.has_belief and not (
            self.has_commitment or self.has_resource or self.has_time_anchor
        )


def measure_structure(text: str) -> StructureStats:
    """Compute structural features of a chunk.

    Args:
        text: Chunk text.

    Returns:
        Word count, digit-to-letter ratio, year token count and ALL-CAPS share.
    """
    words = text.split()
    letters = sum(1 for ch in text if ch.isalpha())
    digits = sum(1 for ch in text if ch.isdigit())
    if letters:
        digit_ratio = digits / letters
    else:
        digit_ratio = 1.0 if digits else 0.0

    alpha_tokens = [word for word in words if any(ch.isalpha() for ch in word)]
    caps_tokens = 0
    for word in alpha_tokens:
        word_letters = [ch for ch in word if ch.isalpha()]
        if len(word_letters) >= 2 and all(ch.isupper() for ch in word_letters):
            caps_tokens += 1
    caps_ratio = caps_tokens / len(alpha_tokens) if alpha_tokens else 0.0

    return StructureStats(
        word_count=len(words),
        digit_ratio=digit_ratio,
        year_tokens=len(YEAR_TOKEN_PATTERN.findall(text)),
        caps_ratio=caps_ratio,
        all_upper=bool(alpha_tokens) and text == text.upper(),
    )


def acceptance_floor(tier: str, config: ScoringConfig | None = None) -> int:
    """Minimum decision score for a quality tier."""
    config = config or get_config().scoring
    floors = config.tier_floors
    return floors.get(tier, floors.get("A", 20))


def _collect_triggers(score: SignalScore) -> list[str]:
    flags = {
        COMMITMENT.name: score.has_commitment,
        DIRECTION.name: score.has_direction,
        CONSTRAINT.name: score.has_constraint,
        RESOURCE.name: score.has_resource,
        TRADEOFF.name: score.has_tradeoff,
        CONDITIONAL.name: score.has_conditional,
        BELIEF.name: score.has_belief,
    }
    triggers = []
    for family in SIGNAL_FAMILIES:
        if flags[family.name]:
            triggers.append(family.trigger)
        if family is COMMITMENT and score.has_time_anchor:
            triggers.append(TIME_ANCHOR_TRIGGER)
    return triggers


def _compute_score(score: SignalScore, strict: bool = False) -> int:
    total = 0
    if score.has_commitment:
        total += COMMITMENT.weight
    if score.has_time_anchor:
        total += WEIGHTS["time_anchor"]
    if score.has_resource:
        total += RESOURCE.weight
    if score.has_tradeoff:
        total += TRADEOFF.weight
    if score.has_conditional:
        total += STRICT_CONDITIONAL_WEIGHT if strict else CONDITIONAL.weight
    if score.has_required_verb and score.has_time_anchor:
        total += WEIGHTS["verb_with_time_anchor"]
    if score.has_required_verb and score.has_tradeoff:
        total += WEIGHTS["verb_with_tradeoff"]

    if score.has_table_noise and not score.has_required_verb:
        total += PENALTIES["table_noise"]
    if score.structure.is_table_like:
        total += PENALTIES["table_like"]
    if score.structure.is_heading_like:
        total += PENALTIES["heading_like"]
    if score.belief_penalty:
        total += PENALTIES["belief"]

    return max(0, min(100, total))


def _decide(score: SignalScore, floor: int, strict: bool = False) -> tuple[Verdict, str]:
    structure = score.structure
    if score.is_boilerplate:
        return Verdict.REJECT, "boilerplate"
    if (structure.is_table_like or structure.is_heading_like) and score.decision_score < floor:
        return Verdict.REJECT, "table or heading"
    if score.belief_penalty:
        return Verdict.SIGNAL, "belief or outlook"
    if not score.has_required_verb:
        return Verdict.REJECT, "no decision verb"
    if strict and score.decision_score < STRICT_MIN_SCORE and not score.has_commitment:
        return Verdict.REJECT, "below strict minimum"
    if score.decision_score >= floor:
        return Verdict.ACCEPT, "score above floor"
    if score.has_commitment or score.has_resource:
        return Verdict.ACCEPT, "commitment or resource signal"
    return Verdict.REJECT, "score below floor"


def _candidate_type(score: SignalScore) -> str:
    if score.verdict is Verdict.SIGNAL:
        return BELIEF_OUTLOOK
    if score.has_conditional:
        return CONDITIONAL_TYPE
    if score.has_commitment or score.has_resource:
        return COMMITMENT_TYPE
    return STATUS_TYPE


def score_chunk(
    text: str,
    tier: str = "A",
    config: ScoringConfig | None = None,
) -> SignalScore:
    """Score one segmented chunk.

    Args:
        text: Chunk text.
        tier: Quality tier of the page the chunk came from.
        config: Scoring config with tier floors and strict mode (default: from config).

    Returns:
        SignalScore with family flags, score, candidate type and verdict.
    """
    score = SignalScore(
        text=text,
        has_commitment=COMMITMENT.matches(text),
        has_direction=DIRECTION.matches(text),
        has_constraint=CONSTRAINT.matches(text),
        has_resource=RESOURCE.matches(text),
        has_tradeoff=TRADEOFF.matches(text),
        has_conditional=CONDITIONAL.matches(text),
        has_belief=BELIEF.matches(text),
        has_table_noise=TABLE_NOISE.matches(text),
        is_boilerplate=BOILERPLATE.matches(text),
        structure=measure_structure(text),
        time_anchors=find_time_anchors(text),
    )
    config = config or get_config().scoring
    score.triggers = _collect_triggers(score)
    score.decision_score = _compute_score(score, strict=config.strict)
    score.verdict, score.reason = _decide(
        score, acceptance_floor(tier, config), strict=config.strict
    )
    score.candidate_type = _candidate_type(score)
    return score
