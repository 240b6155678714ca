"""Tests for page sources."""

from pathlib import Path

import pytest

from dnav.governor import DocumentStatus, Governor
from dnav.ingest import (
    FLAT_TEXT,
    PAGINATED,
    FlatTextSource,
    PageExtractionError,
    PagedTextSource,
    PDFPageSource,
    open_source,
)


class TestPagedTextSource:
    """Tests for in-memory paged text."""

    def test_pages_by_number(self) -> None:
        source = PagedTextSource("Deck", [(1, "one"), (2, "two")])
        assert source.source_type == PAGINATED
        assert source.total_pages == 2
        assert source.read_page(2) == "two"

    def test_gaps_are_blank(self) -> None:
        source = PagedTextSource("Deck", [(1, "one"), (3, "three")])
        assert source.total_pages == 3
        assert source.read_page(2) == ""

    def test_out_of_range(self) -> None:
        source = PagedTextSource("Deck", [(1, "one")])
        with pytest.raises(PageExtractionError):
            source.read_page(2)

    def test_page_numbers_start_at_one(self) -> None:
        with pytest.raises(ValueError):
            PagedTextSource("Deck", [(0, "cover")])


class TestFlatTextSource:
    """Tests for pasted and plain-text sources."""

    def test_single_page(self) -> None:
        source = FlatTextSource("Pasted text", "We will hire.")
        assert source.source_type == FLAT_TEXT
        assert source.total_pages == 1
        assert source.read_page(1) == "We will hire."

    def test_only_page_one(self) -> None:
        with pytest.raises(PageExtractionError):
            FlatTextSource("Pasted text", "x").read_page(2)

    def test_from_file(self, temp_dir: Path) -> None:
        path = temp_dir / "memo.txt"
        path.write_text("We will hire.", encoding="utf-8")
        source = FlatTextSource.from_file(path)
        assert source.label == "memo.txt"
        assert source.read_page(1) == "We will hire."

    def test_from_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(PageExtractionError):
            FlatTextSource.from_file(temp_dir / "missing.txt")


class TestOpenSource:
    """Tests for picking a source by file type."""

    def test_text_file(self, sample_memo: Path) -> None:
        assert isinstance(open_source(sample_memo), FlatTextSource)

    def test_pdf_is_opened_lazily(self, temp_dir: Path) -> None:
        path = temp_dir / "report.pdf"
        path.write_bytes(b"")
        source = open_source(path)
        assert isinstance(source, PDFPageSource)
        assert source.label == "report.pdf"

    def test_unsupported_type(self, temp_dir: Path) -> None:
        with pytest.raises(PageExtractionError, match="Unsupported file type"):
            open_source(temp_dir / "notes.docx")


class TestPDFPageSource:
    """Tests for PDF error handling."""

    def test_unreadable_pdf(self, temp_dir: Path) -> None:
        path = temp_dir / "broken.pdf"
        path.write_bytes(b"")
        with pytest.raises(PageExtractionError, match="Failed to read PDF"):
            PDFPageSource(path).total_pages

    def test_unreadable_pdf_marks_document_failed(self, temp_dir: Path) -> None:
        path = temp_dir / "broken.pdf"
        path.write_bytes(b"")
        governor = Governor()
        (doc,) = governor.enqueue([PDFPageSource(path)])

        governor.run()

        assert doc.status is DocumentStatus.ERROR
        assert "Failed to read PDF" in doc.error
