"""Page text normalization.

Turns raw extracted text into reconstructed paragraphs: whitespace cleanup,
de-hyphenation, suppression of running headers/footers and re-joining of
column-wrapped lines.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from dnav.utils.text import collapse_inline_whitespace

# Bullet markers at the start of a line: •, ▪, ●, ◦, *, -, – or "1." / "1)"
BULLET_PATTERN = re.compile(r"^(?:[•‣▪●◦*\-–]|\d{1,2}[.)])\s+")

_HYPHEN_BREAK = re.compile(r"([A-Za-z])-\n([A-Za-z])")
_TERMINAL_PUNCTUATION = (".", "!", "?", ";")

DEFAULT_REPEATED_LINE_RATIO = 0.3


@dataclass
class LineFrequencyCache:
    """Per-document record of how many pages each line appeared on.

    One cache belongs to one document and survives pause/resume so running
    headers keep being recognised after the document is re-entered.
    """

    counts: Counter[str] = field(default_factory=Counter)
    pages_seen: int = 0

    def observe(self, lines: list[str]) -> None:
        """Record one page worth of lines (each line counted once per page)."""
        self.pages_seen += 1
        for line in set(lines):
            self.counts[line] += 1

    def is_repeated(self, line: str, ratio: float = DEFAULT_REPEATED_LINE_RATIO) -> bool:
        """Check if a line recurs on more than ``ratio`` of the pages seen so far.

        A line must have been seen on at least two pages; a single page can
        never establish a header.
        """
        if self.pages_seen == 0:
            return False
        count = self.counts.get(line, 0)
        return count >= 2 and count / self.pages_seen > ratio

    def snapshot(self) -> tuple[int, dict[str, int]]:
        """Return an immutable view of the cache state."""
        return self.pages_seen, dict(self.counts)


@dataclass
class NormalizedText:
    """Result of normalizing one page or one pasted document."""

    text: str
    lines: list[str]
    paragraphs: list[str]


def dehyphenate(text: str) -> str:
    """Join words broken across lines with a trailing hyphen.

    Args:
        text: Text with line breaks.

    Returns:
        Text where "manu-\\nfacturing" becomes "manufacturing".
    """
    return _HYPHEN_BREAK.sub(r"\1\2", text)


def is_bullet(line: str) -> bool:
    """Check if a line starts with a bullet or list-number marker."""
    return bool(BULLET_PATTERN.match(line))


def reconstruct_paragraphs(lines: list[str]) -> list[str]:
    """Merge wrapped lines back into paragraphs.

    Consecutive non-empty lines are joined until one ends with terminal
    punctuation. A blank line or a bullet marker always starts a new paragraph.

    Args:
        lines: Whitespace-normalized lines, blank lines included.

    Returns:
        List of paragraphs.
    """
    paragraphs: list[str] = []
    current = ""

    for line in lines:
        line = line.strip()
        if not line:
            if current:
                paragraphs.append(current)
                current = ""
            continue

        if not current:
            current = line
        elif is_bullet(line):
            paragraphs.append(current)
            current = line
        else:
            current = f"{current} {line}"

        if current.endswith(_TERMINAL_PUNCTUATION):
            paragraphs.append(current)
            current = ""

    if current:
        paragraphs.append(current)

    return paragraphs


def normalize_text(
    raw: str,
    cache: LineFrequencyCache | None = None,
    repeated_line_ratio: float = DEFAULT_REPEATED_LINE_RATIO,
) -> NormalizedText:
    """Normalize raw page text.

    Args:
        raw: Raw text of one page, or of a whole pasted document.
        cache: Repeated-line cache of the owning document. Only paginated
            sources pass one; when given, the page is recorded in it and
            lines recurring on too many pages are dropped.
        repeated_line_ratio: Share of pages a line must exceed to be treated
            as a header or footer.

    Returns:
        NormalizedText with paragraphs joined by newlines, the surviving
        non-empty lines and the paragraph list.
    """
    if not raw or not raw.strip():
        return NormalizedText(text="", lines=[], paragraphs=[])

    collapsed = collapse_inline_whitespace(raw)
    lines = dehyphenate(collapsed).split("\n")

    if cache is not None:
        cache.observe([line for line in lines if line])
        lines = [
            line
            for line in lines
            if not line or not cache.is_repeated(line, repeated_line_ratio)
        ]

    paragraphs = reconstruct_paragraphs(lines)
    return NormalizedText(
        text="\n".join(paragraphs),
        lines=[line for line in lines if line],
        paragraphs=paragraphs,
    )
