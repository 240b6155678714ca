"""Text utilities for D-NAV intake."""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_INLINE_WHITESPACE_RUN = re.compile(r"[^\S\n]+")


def normalize_whitespace(value: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim."""
    return _WHITESPACE_RUN.sub(" ", value).strip()


def collapse_inline_whitespace(value: str) -> str:
    """Collapse whitespace runs inside each line, trimming every line.

    Newlines survive so that line structure is still available to later steps.

    Examples:
        >>> collapse_inline_whitespace("  a \\t b \\n  c  ")
        'a b\\nc'
    """
    lines = value.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(_INLINE_WHITESPACE_RUN.sub(" ", line).strip() for line in lines)

