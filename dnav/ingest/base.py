"""Base classes for page sources.

A page source is the boundary to the page-extraction collaborator: it hands
the pipeline raw text one page at a time and knows nothing about scoring.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

PAGINATED = "paginated"
FLAT_TEXT = "flat_text"


class PageExtractionError(Exception):
    """A source could not produce text for a page."""


class PageSource(ABC):
    """Base class for sources of page text."""

    # 'paginated' sources are processed page by page and can be paused;
    # 'flat_text' sources are processed as a single unit
    source_type: str = PAGINATED

    def __init__(self, label: str) -> None:
        self.label = label

    @property
    @abstractmethod
    def total_pages(self) -> int:
        """Number of pages the source can provide.

        Raises:
            PageExtractionError: If the source cannot be opened.
        """

    @abstractmethod
    def read_page(self, page_number: int) -> str:
        """Return the raw text of a 1-based page.

        Raises:
            PageExtractionError: If the page cannot be extracted.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r})"
