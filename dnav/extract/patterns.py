"""Lexical signal tables for decision candidate scoring.

Every family the scorer looks for lives here as declarative data: a name, the
trigger label shown to reviewers, an additive weight and the term patterns.
Scoring logic in ``dnav.extract.scoring`` only combines these tables, so a
term can be added or re-weighted without touching it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern


def _word(term: str) -> Pattern[str]:
    """Compile a term as a case-insensitive, word-bounded regex."""
    return re.compile(rf"\b(?:{term})\b", re.IGNORECASE)


@dataclass(frozen=True)
class SignalFamily:
    """A family of lexical terms that together form one signal."""

    name: str
    trigger: str  # Label attached to candidates that fire this family
    weight: int  # Additive score contribution (0 for gating-only families)
    patterns: tuple[Pattern[str], ...]

    def search(self, text: str) -> str | None:
        """Return the first matching term in text, or None."""
        for pattern in self.patterns:
            match = pattern.search(text)
            if match:
                return match.group(0)
        return None

    def matches(self, text: str) -> bool:
        """Check if any term of the family occurs in text."""
        return self.search(text) is not None


COMMITMENT = SignalFamily(
    name="commitment",
    trigger="Commitment verb",
    weight=35,
    patterns=(
        _word(r"will|shall"),
        _word(r"plan(?:s|ned|ning)?|intend(?:s|ed)?|commit(?:s|ted|ting)?"),
        _word(r"launch(?:es|ed|ing)?"),
        _word(r"begin(?:s|ning)?|began|begun|start(?:s|ed|ing)?"),
        _word(r"ramp(?:s|ed|ing)?"),
        _word(r"invest(?:s|ed|ing|ment|ments)?"),
        _word(r"deploy(?:s|ed|ing|ment)?"),
        _word(r"expand(?:s|ed|ing)?"),
        _word(r"build(?:s|ing)?|built"),
        _word(r"commission(?:s|ed|ing)?"),
        _word(r"hir(?:e|es|ed|ing)"),
        _word(r"open(?:s|ed|ing)?"),
        _word(r"reduc(?:e|es|ed|ing)"),
        _word(r"allocat(?:e|es|ed|ing)"),
        _word(r"approv(?:e|es|ed|ing)"),
        _word(r"transition(?:s|ed|ing)?"),
    ),
)

DIRECTION = SignalFamily(
    name="direction",
    trigger="Direction language",
    weight=0,
    patterns=(
        _word(r"(?:de)?prioriti[sz](?:e|es|ed|ing)"),
        _word(r"(?:re)?focus(?:es|ed|ing)?"),
        _word(r"pursu(?:e|es|ed|ing)"),
        _word(r"shift(?:s|ed|ing)? (?:to|toward|towards|away)"),
        _word(r"double down"),
    ),
)

CONSTRAINT = SignalFamily(
    name="constraint",
    trigger="Constraint language",
    weight=0,
    patterns=(
        _word(r"must|cannot"),
        _word(r"before|after"),
        _word(r"dependent on|contingent on|subject to"),
        _word(r"requires?|required"),
    ),
)

RESOURCE = SignalFamily(
    name="resource",
    trigger="Resource/capex",
    weight=12,
    patterns=(
        _word(r"capex|capital expenditures?"),
        _word(r"capacity"),
        _word(r"factory|factories|plants?"),
        _word(r"construction|manufacturing|production"),
        _word(r"headcount"),
        _word(r"compute"),
        _word(r"budget"),
    ),
)

TRADEOFF = SignalFamily(
    name="tradeoff",
    trigger="Tradeoff",
    weight=8,
    patterns=(
        _word(r"at the (?:cost|expense) of"),
        _word(r"in order to"),
        _word(r"in exchange for"),
        _word(r"trade-?offs?"),
        _word(r"instead of|rather than"),
    ),
)

CONDITIONAL = SignalFamily(
    name="conditional",
    trigger="Conditional",
    weight=8,
    patterns=(_word(r"if|when|assuming|unless"),),
)

BELIEF = SignalFamily(
    name="belief",
    trigger="Belief/forecast language",
    weight=0,
    patterns=(
        _word(r"expect(?:s|ed|ing|ation|ations)?"),
        _word(r"believe(?:s|d)?"),
        _word(r"anticipat(?:e|es|ed|ing)"),
        _word(r"forecast(?:s|ed)?|estimat(?:e|es|ed)"),
        _word(r"may|might|could"),
        _word(r"uncertain(?:ty)?|likely"),
    ),
)

# KPI row vocabulary; these only count against a chunk that has no verb signal
TABLE_NOISE = SignalFamily(
    name="table_noise",
    trigger="Table noise",
    weight=-30,
    patterns=(
        _word(r"yoy|qoq"),
        _word(r"installed"),
        _word(r"production rate"),
        _word(r"utilization"),
        _word(r"gaap|non-gaap|eps|diluted"),
        _word(r"in (?:millions|thousands|billions)"),
        _word(r"cash flows?|net income|gross margin"),
    ),
)

BOILERPLATE = SignalFamily(
    name="boilerplate",
    trigger="Boilerplate",
    weight=0,
    patterns=(
        _word(r"forward-looking statements?"),
        _word(r"differ materially"),
        _word(r"undertakes? no obligation"),
        _word(r"safe harbou?r"),
        _word(r"risk factors"),
        _word(r"private securities litigation reform act"),
        _word(r"all rights reserved"),
    ),
)

# Quarter labels are tried before bare years so "Q1 2025" stays one anchor
TIME_ANCHOR_PATTERN = re.compile(
    r"\b(?:"
    r"q[1-4](?:\s?fy)?(?:[\s-]?(?:19|20)\d{2})?"
    r"|[12]h\s?(?:19|20)\d{2}"
    r"|fy\s?(?:19|20)\d{2}"
    r"|(?:first|second) half(?: of (?:19|20)\d{2})?"
    r"|by (?:the )?end of(?: the)?(?: (?:19|20)\d{2}| year| quarter| month)?"
    r"|later this (?:year|quarter|month)"
    r"|next (?:year|quarter|month)"
    r"|(?:19|20)\d{2}"
    r")\b",
    re.IGNORECASE,
)

YEAR_TOKEN_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")

SIGNAL_FAMILIES = (
    COMMITMENT,
    DIRECTION,
    CONSTRAINT,
    RESOURCE,
    TRADEOFF,
    CONDITIONAL,
    BELIEF,
)

TIME_ANCHOR_TRIGGER = "Time anchor"

# Additive weights and penalties not owned by a single family
WEIGHTS = {
    "time_anchor": 15,
    "verb_with_time_anchor": 10,
    "verb_with_tradeoff": 8,
}

# Strict mode: smaller conditional bonus, and a higher bar for chunks
# without commitment language
STRICT_CONDITIONAL_WEIGHT = 2
STRICT_MIN_SCORE = 45

PENALTIES = {
    "table_noise": TABLE_NOISE.weight,
    "table_like": -45,
    "heading_like": -35,
    "belief": -25,
}

# Structural thresholds for table and heading detection
MAX_DIGIT_RATIO = 0.35
MAX_YEAR_TOKENS = 3
HEADING_CAPS_RATIO = 0.6
HEADING_MAX_WORDS = 12
UPPERCASE_MAX_WORDS = 8

# First match wins, so declaration order is priority order
CATEGORY_BUCKETS: list[tuple[str, Pattern[str]]] = [
    (
        "Product",
        _word(r"products?|features?|releases?|roadmap|launch(?:es|ed|ing)?|customers?"),
    ),
    (
        "Capex",
        _word(
            r"capex|capital expenditures?|factory|factories|construction|plants?"
            r"|capacity|manufacturing|equipment"
        ),
    ),
    (
        "Platform",
        _word(r"platforms?|infrastructure|compute|data cent(?:er|re)s?|cloud|architecture"),
    ),
    (
        "Ops",
        _word(r"operations|ops|hiring|headcount|supply chain|logistics|workflows?"),
    ),
]

DEFAULT_CATEGORY = "Other"

KNOWN_ACRONYMS = ("AI", "GPU", "ERP", "CRM", "API", "SOC", "ISO", "EV", "AWS", "SaaS")

STOP_WORDS = frozenset(
    {
        "the", "and", "or", "to", "of", "in", "for", "with", "on", "by", "at",
        "a", "an", "is", "are", "be", "as", "we", "our", "this", "that", "from",
        "it", "they", "their",
    }
)


def detect_category(text: str) -> str:
    """Bucket text into a category by keyword lookup.

    Args:
        text: Raw chunk text.

    Returns:
        The first bucket whose keywords match, or "Other".
    """
    for bucket, pattern in CATEGORY_BUCKETS:
        if pattern.search(text):
            return bucket
    return DEFAULT_CATEGORY


def find_time_anchors(text: str) -> list[str]:
    """Find time anchors in text, lower-cased and de-duplicated in order.

    Args:
        text: Text to search.

    Returns:
        Anchors such as "q1 2025", "later this year" or "2026".
    """
    anchors: list[str] = []
    for match in TIME_ANCHOR_PATTERN.finditer(text):
        anchor = re.sub(r"\s+", " ", match.group(0).lower())
        if anchor not in anchors:
            anchors.append(anchor)
    return anchors
