"""Ingest module: page sources feeding the extraction pipeline."""

from __future__ import annotations

from pathlib import Path

from dnav.ingest.base import FLAT_TEXT, PAGINATED, PageExtractionError, PageSource
from dnav.ingest.pdf import PDFPageSource
from dnav.ingest.text import FlatTextSource, PagedTextSource

TEXT_EXTENSIONS = [".txt", ".md", ".markdown"]


def open_source(path: Path) -> PageSource:
    """Get a page source for the given file path.

    Args:
        path: Path to a PDF or plain-text file.

    Returns:
        PDFPageSource for PDFs, FlatTextSource for text files.

    Raises:
        PageExtractionError: If no source handles the file type.
    """
    ext = path.suffix.lower()
    if ext in PDFPageSource.extensions:
        return PDFPageSource(path)
    if ext in TEXT_EXTENSIONS:
        return FlatTextSource.from_file(path)
    raise PageExtractionError(f"Unsupported file type: {path.suffix or path.name}")


__all__ = [
    "FLAT_TEXT",
    "PAGINATED",
    "FlatTextSource",
    "PDFPageSource",
    "PageExtractionError",
    "PageSource",
    "PagedTextSource",
    "open_source",
]
