"""In-memory and plain-text page sources."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from dnav.ingest.base import FLAT_TEXT, PageExtractionError, PageSource


class PagedTextSource(PageSource):
    """Pages handed over as ``(page_number, text)`` pairs."""

    def __init__(self, label: str, pages: Iterable[tuple[int, str]]) -> None:
        super().__init__(label)
        self._pages = {number: text for number, text in pages}
        if any(number < 1 for number in self._pages):
            raise ValueError("Page numbers start at 1")

    @property
    def total_pages(self) -> int:
        return max(self._pages, default=0)

    def read_page(self, page_number: int) -> str:
        if page_number < 1 or page_number > self.total_pages:
            raise PageExtractionError(f"Page {page_number} out of range for {self.label}")
        # Gaps in the numbering are blank pages
        return self._pages.get(page_number, "")


class FlatTextSource(PageSource):
    """A single text blob, such as a pasted memo."""

    source_type = FLAT_TEXT

    def __init__(self, label: str, text: str) -> None:
        super().__init__(label)
        self._text = text

    @classmethod
    def from_file(cls, path: Path) -> FlatTextSource:
        """Read a UTF-8 text file as a flat source."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PageExtractionError(f"Failed to read {path}: {e}") from e
        return cls(label=path.name, text=text)

    @property
    def total_pages(self) -> int:
        return 1

    def read_page(self, page_number: int) -> str:
        if page_number != 1:
            raise PageExtractionError(f"Flat text has a single page, not {page_number}")
        return self._text
