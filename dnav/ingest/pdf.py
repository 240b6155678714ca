"""PDF page source."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from dnav.ingest.base import PageExtractionError, PageSource

if TYPE_CHECKING:
    from pypdf import PdfReader

logger = logging.getLogger(__name__)


class PDFPageSource(PageSource):
    """Reads page text from a PDF with pypdf.

    The file is opened lazily on first access so that a broken PDF surfaces
    as an error on its own document rather than when it is queued.
    """

    extensions = [".pdf"]

    def __init__(self, path: Path, label: str | None = None) -> None:
        super().__init__(label or path.name)
        self.path = path
        self._reader: PdfReader | None = None

    def _open(self) -> PdfReader:
        if self._reader is not None:
            return self._reader

        from pypdf import PdfReader
        from pypdf.errors import PdfReadError

        try:
            reader = PdfReader(self.path)
        except (PdfReadError, OSError) as e:
            raise PageExtractionError(f"Failed to read PDF {self.path}: {e}") from e

        if reader.is_encrypted:
            raise PageExtractionError(f"PDF is encrypted and cannot be parsed: {self.path}")

        self._reader = reader
        return reader

    @property
    def total_pages(self) -> int:
        return len(self._open().pages)

    def read_page(self, page_number: int) -> str:
        reader = self._open()
        if page_number < 1 or page_number > len(reader.pages):
            raise PageExtractionError(f"Page {page_number} out of range for {self.path}")

        try:
            return reader.pages[page_number - 1].extract_text() or ""
        except Exception as e:
            # One unreadable page should not fail the whole document
            logger.warning(f"Failed to extract text from page {page_number} of {self.path}: {e}")
            return ""
