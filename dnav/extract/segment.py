"""Segmentation of normalized paragraphs into candidate statements."""

from __future__ import annotations

import re

from dnav.extract.normalize import BULLET_PATTERN
from dnav.extract.patterns import BOILERPLATE, COMMITMENT

# Terminal punctuation, whitespace, then something that can open a sentence
_SENTENCE_BREAK = re.compile(r"(?<=[.!?;])\s+(?=[A-Z0-9\"'“(])")
_INLINE_BULLET = re.compile(r"\s+[•‣▪●◦]\s+")
_CLAUSE_BREAK = re.compile(r",\s+")
_LEADING_CONJUNCTION = re.compile(r"^(?:and|or|but)\s+", re.IGNORECASE)
# Initialisms and dotted abbreviations: "U.S.", "e.g.", "J."
_DOTTED_ABBREVIATION = re.compile(r"(?:[A-Za-z]\.)+")

ABBREVIATIONS = frozenset(
    {
        "inc.", "corp.", "co.", "ltd.", "llc.", "plc.", "mr.", "mrs.", "ms.",
        "dr.", "st.", "vs.", "no.", "nos.", "approx.", "fig.", "est.", "dept.",
        "jan.", "feb.", "mar.", "apr.", "jun.", "jul.", "aug.", "sep.",
        "sept.", "oct.", "nov.", "dec.",
    }
)


def is_boilerplate(sentence: str) -> bool:
    """Check if a sentence is legal or safe-harbor boilerplate."""
    return BOILERPLATE.matches(sentence)


def flatten_bullets(paragraph: str) -> list[str]:
    """Turn bullet markers into plain sentence starts.

    Args:
        paragraph: One reconstructed paragraph.

    Returns:
        The paragraph split at inline bullets, with leading markers removed.
    """
    items: list[str] = []
    for item in _INLINE_BULLET.split(paragraph):
        item = BULLET_PATTERN.sub("", item.strip()).strip()
        if item:
            items.append(item)
    return items


def _ends_with_abbreviation(text: str) -> bool:
    last = text.rsplit(" ", 1)[-1]
    if last.lower() in ABBREVIATIONS:
        return True
    return bool(_DOTTED_ABBREVIATION.fullmatch(last))


def split_sentences(text: str) -> list[str]:
    """Split text at sentence boundaries, keeping abbreviations intact.

    Args:
        text: Text without bullet markers.

    Returns:
        Non-empty sentences in order.
    """
    sentences: list[str] = []
    start = 0
    for match in _SENTENCE_BREAK.finditer(text):
        head = text[start : match.start()]
        if _ends_with_abbreviation(head):
            continue
        sentences.append(head)
        start = match.end()
    sentences.append(text[start:])
    return [sentence.strip() for sentence in sentences if sentence.strip()]


def split_clauses(sentence: str) -> list[str]:
    """Split a multi-clause commitment sentence into one piece per clause.

    Only sentences containing both a comma and a commitment verb are split;
    "We will launch X, expand Y, and reduce Z" yields three clauses.
    """
    if "," not in sentence or not COMMITMENT.matches(sentence):
        return [sentence]

    clauses: list[str] = []
    for clause in _CLAUSE_BREAK.split(sentence):
        clause = _LEADING_CONJUNCTION.sub("", clause.strip()).strip()
        if clause:
            clauses.append(clause)
    return clauses


def segment(paragraphs: list[str] | str, *, drop_boilerplate: bool = False) -> list[str]:
    """Split paragraphs into candidate statement chunks.

    Args:
        paragraphs: Reconstructed paragraphs, or newline-joined paragraph text.
        drop_boilerplate: Drop whole disclaimer sentences before clause
            splitting, so no clause of a disclaimer survives on its own.

    Returns:
        Ordered list of non-empty chunks.
    """
    if isinstance(paragraphs, str):
        paragraphs = paragraphs.split("\n")

    chunks: list[str] = []
    for paragraph in paragraphs:
        for item in flatten_bullets(paragraph):
            for sentence in split_sentences(item):
                if drop_boilerplate and is_boilerplate(sentence):
                    continue
                chunks.extend(split_clauses(sentence))
    return chunks
