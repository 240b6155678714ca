"""Processing governor: queue, pagination and the document state machine.

The governor pulls queued documents in strict FIFO order and feeds their pages
through the extraction pipeline one at a time. Between pages it hands control
back to the host through an injected ``yield_control`` callback, then decides
whether to continue, pause or stop:

- cancellation requested: abort silently, the document goes back to pending
- pause requested by the host: pause and stop the run
- time ceiling for this document exceeded: pause it, move on to the next one
- host-reported memory pressure above threshold: pause and stop the run

Paused documents keep their processed page count, repeated-line cache and
candidates; ``resume()`` re-queues them to continue from the next page.

Document states::

    pending -> processing -> paused | done | error
    paused  -> pending (resume)
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from dnav.config import Config, get_config
from dnav.extract.candidates import (
    CandidatePool,
    DecisionCandidate,
    PageExtraction,
    extract_page_candidates,
)
from dnav.extract.normalize import LineFrequencyCache
from dnav.extract.quality import QualityAssessment, worst_tier
from dnav.ingest.base import FLAT_TEXT, PageSource

logger = logging.getLogger(__name__)

IDLE = "Idle"


class DocumentStatus(str, Enum):
    """Lifecycle states of a queued document."""

    PENDING = "pending"
    PROCESSING = "processing"
    PAUSED = "paused"
    DONE = "done"
    ERROR = "error"


class RunOutcome(str, Enum):
    """How processing of one document ended."""

    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"
    PAUSED_BY_REQUEST = "paused_by_request"
    PAUSED_TIME = "paused_time"
    PAUSED_MEMORY = "paused_memory"

    @property
    def stops_run(self) -> bool:
        """Whether the run loop stops instead of moving to the next document."""
        return self in (
            RunOutcome.CANCELLED,
            RunOutcome.PAUSED_BY_REQUEST,
            RunOutcome.PAUSED_MEMORY,
        )


@dataclass
class Document:
    """A queued source and its processing progress."""

    id: str
    label: str
    source_type: str
    status: DocumentStatus = DocumentStatus.PENDING
    processed_pages: int = 0
    total_pages: int | None = None
    quality_tier: str | None = None
    quality_reason: str | None = None
    pause_message: str | None = None
    error: str | None = None
    candidate_count: int = 0
    limit_applied: str | None = None

    @property
    def last_processed_page(self) -> int:
        # Pages are processed strictly in order starting at 1
        return self.processed_pages


@dataclass
class _DocumentState:
    """Per-document working state that must survive pause/resume."""

    document: Document
    source: PageSource
    line_cache: LineFrequencyCache = field(default_factory=LineFrequencyCache)
    quality: QualityAssessment | None = None


def _no_yield() -> None:
    return None


def _no_memory_pressure() -> float | None:
    return None


class Governor:
    """Single-threaded, cooperatively scheduled extraction loop."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        yield_control: Callable[[], None] | None = None,
        memory_probe: Callable[[], float | None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        merge_across_documents: bool | None = None,
    ) -> None:
        """Create a governor.

        Args:
            config: Configuration (default: global config).
            yield_control: Called after every committed page so the host can
                stay responsive; the host may call ``pause()`` or ``cancel()``
                from inside it.
            memory_probe: Returns the host's memory-pressure ratio (0..1), or
                None when unknown.
            clock: Monotonic seconds, used for the per-document time ceiling.
            merge_across_documents: Override for cross-document dedup.
        """
        self.config = config or get_config()
        self._yield_control = yield_control or _no_yield
        self._memory_probe = memory_probe or _no_memory_pressure
        self._clock = clock
        self.candidates = CandidatePool(
            self.config.dedup, merge_across_documents=merge_across_documents
        )

        self._states: dict[str, _DocumentState] = {}
        self._queue: deque[str] = deque()
        self._cancel_requested = False
        self._pause_requested = False
        self._running = False
        self._active_id: str | None = None
        self._status_line = IDLE

    # -- Host control surface -------------------------------------------------

    @property
    def documents(self) -> list[Document]:
        return [state.document for state in self._states.values()]

    @property
    def queue(self) -> list[Document]:
        """Documents waiting to be processed, in processing order."""
        return [self._states[doc_id].document for doc_id in self._queue]

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status_line(self) -> str:
        return self._status_line

    @property
    def progress(self) -> int:
        """Overall progress 0-100 over documents with known page counts."""
        processed = 0
        total = 0
        for doc in self.documents:
            if doc.total_pages is None:
                continue
            processed += doc.processed_pages
            # Failed documents will not advance further
            total += doc.processed_pages if doc.status is DocumentStatus.ERROR else doc.total_pages
        if total == 0:
            return 0
        return round(100 * processed / total)

    def get_document(self, doc_id: str) -> Document:
        return self._states[doc_id].document

    def line_cache(self, doc_id: str) -> LineFrequencyCache:
        """Repeated-line cache of a document."""
        return self._states[doc_id].line_cache

    def enqueue(self, sources: Iterable[PageSource]) -> list[Document]:
        """Queue sources for processing, in order.

        Returns:
            The created documents, all pending.
        """
        created: list[Document] = []
        for source in sources:
            doc = Document(
                id=str(uuid.uuid4()),
                label=source.label,
                source_type=source.source_type,
                total_pages=1 if source.source_type == FLAT_TEXT else None,
            )
            self._states[doc.id] = _DocumentState(document=doc, source=source)
            self._queue.append(doc.id)
            created.append(doc)
            logger.info(f"Queued {doc.label} ({doc.source_type})")
        return created

    def pause(self) -> bool:
        """Ask the active run to pause after the current page.

        Returns:
            True if a run was active and will pause.
        """
        if not self._running:
            return False
        self._pause_requested = True
        return True

    def resume(self) -> list[Document]:
        """Re-queue every paused document to continue from its next page.

        Resumed documents go ahead of documents that never started, in the
        order they were queued. Call ``run()`` afterwards to process them.
        """
        self._pause_requested = False
        resumed: list[Document] = []
        for state in self._states.values():
            doc = state.document
            if doc.status is not DocumentStatus.PAUSED:
                continue
            doc.status = DocumentStatus.PENDING
            doc.pause_message = None
            resumed.append(doc)
            logger.info(f"Resuming {doc.label} from page {doc.processed_pages + 1}")

        resumed_ids = [doc.id for doc in resumed]
        waiting = [doc_id for doc_id in self._queue if doc_id not in resumed_ids]
        self._queue = deque(resumed_ids + waiting)
        return resumed

    def cancel(self) -> bool:
        """Stop the active run; the current page, if unfinished, is discarded.

        Only an active run can be cancelled. Called while idle this does
        nothing, so the next ``run()`` processes the queue as usual.

        Returns:
            True if a run was active and will stop.
        """
        if not self._running:
            return False
        self._cancel_requested = True
        return True

    def clear(self) -> None:
        """Cancel any run and forget all documents and candidates."""
        self._cancel_requested = True
        self._states.clear()
        self._queue.clear()
        self.candidates.clear()
        self._active_id = None
        self._status_line = IDLE

    def review_list(self, include_signals: bool = False) -> list[DecisionCandidate]:
        return self.candidates.review_list(include_signals=include_signals)

    def signals(self) -> list[DecisionCandidate]:
        return self.candidates.signals()

    def set_kept(self, candidate_id: str, kept: bool = True) -> DecisionCandidate:
        return self.candidates.set_kept(candidate_id, kept)

    def set_category(self, candidate_id: str, category: str) -> DecisionCandidate:
        return self.candidates.set_category(candidate_id, category)

    def set_metrics(self, candidate_id: str, **values: int | None) -> DecisionCandidate:
        return self.candidates.set_metrics(candidate_id, **values)

    # -- Processing loop ------------------------------------------------------

    def run(self) -> None:
        """Process queued documents until the queue drains, a stop is requested,
        or a pause stops the run."""
        if self._running:
            return

        self._running = True
        self._cancel_requested = False
        self._pause_requested = False
        last_outcome: RunOutcome | None = None
        try:
            while self._queue:
                if self._cancel_requested:
                    last_outcome = RunOutcome.CANCELLED
                    break

                doc_id = self._queue[0]
                state = self._states[doc_id]
                self._active_id = doc_id
                last_outcome = self._process(state)

                if last_outcome is RunOutcome.CANCELLED:
                    break
                if self._queue and self._queue[0] == doc_id:
                    self._queue.popleft()
                if last_outcome.stops_run:
                    break
            if self._cancel_requested:
                last_outcome = RunOutcome.CANCELLED
        finally:
            self._running = False
            self._active_id = None
            self._status_line = self._summarize(last_outcome)

    def _process(self, state: _DocumentState) -> RunOutcome:
        doc = state.document
        doc.status = DocumentStatus.PROCESSING
        doc.pause_message = None
        logger.info(f"Processing {doc.label} from page {doc.processed_pages + 1}")

        try:
            if doc.source_type == FLAT_TEXT:
                outcome = self._process_flat(state)
            else:
                outcome = self._process_paginated(state)
        except Exception as e:
            logger.exception(f"Extraction failed for {doc.label}")
            doc.status = DocumentStatus.ERROR
            doc.error = str(e) or type(e).__name__
            return RunOutcome.ERROR

        if outcome is RunOutcome.DONE:
            doc.status = DocumentStatus.DONE
            logger.info(f"Finished {doc.label}: {doc.candidate_count} candidates")
        return outcome

    def _process_flat(self, state: _DocumentState) -> RunOutcome:
        doc = state.document
        if self._cancel_requested:
            doc.status = DocumentStatus.PENDING
            return RunOutcome.CANCELLED

        doc.total_pages = 1
        self._status_line = f"Parsing {self._position(doc)}: {doc.label}"
        raw = state.source.read_page(1)
        extraction = extract_page_candidates(
            doc.id,
            doc.label,
            1,
            raw,
            repeated_line_ratio=self.config.governor.repeated_line_ratio,
            quality_config=self.config.quality,
            scoring_config=self.config.scoring,
        )
        self._commit(state, extraction)
        self._yield_control()
        return RunOutcome.DONE

    def _process_paginated(self, state: _DocumentState) -> RunOutcome:
        doc = state.document
        limits = self.config.governor
        started = self._clock()

        if doc.total_pages is None:
            available = state.source.total_pages
            cap = limits.max_pages_per_document
            doc.total_pages = min(available, cap) if cap > 0 else available
            if cap > 0 and available > cap:
                doc.limit_applied = f"{cap} page limit reached."
                logger.warning(f"{doc.label}: only the first {cap} of {available} pages are read")

        total = doc.total_pages
        page = doc.processed_pages + 1
        while page <= total:
            if self._cancel_requested:
                doc.status = DocumentStatus.PENDING
                return RunOutcome.CANCELLED

            self._status_line = f"Parsing {self._position(doc)}: {doc.label} - page {page}/{total}"
            raw = state.source.read_page(page)
            extraction = extract_page_candidates(
                doc.id,
                doc.label,
                page,
                raw,
                cache=state.line_cache,
                repeated_line_ratio=limits.repeated_line_ratio,
                quality_config=self.config.quality,
                scoring_config=self.config.scoring,
            )
            self._commit(state, extraction)
            self._yield_control()

            if page == total:
                break
            stop = self._check_limits(doc, started)
            if stop is not None:
                return stop
            page += 1

        return RunOutcome.DONE

    def _commit(self, state: _DocumentState, extraction: PageExtraction) -> None:
        """Merge one page into the running candidate set and record progress."""
        doc = state.document
        self.candidates.add(extraction.candidates)
        doc.candidate_count += len(extraction.decisions)
        doc.processed_pages = extraction.page_number

        state.quality = worst_tier(state.quality, extraction.quality)
        doc.quality_tier = state.quality.tier
        doc.quality_reason = state.quality.reason
        logger.debug(
            f"{doc.label} page {extraction.page_number}: {extraction.chunk_count} chunks, "
            f"{len(extraction.decisions)} decisions, {len(extraction.signals)} signals"
        )

    def _check_limits(self, doc: Document, started: float) -> RunOutcome | None:
        """Evaluate the stop conditions after a page, in priority order."""
        page = doc.processed_pages
        resume_hint = f"Resume to continue from page {page + 1}."

        if self._cancel_requested:
            doc.status = DocumentStatus.PENDING
            return RunOutcome.CANCELLED

        if self._pause_requested:
            self._pause(doc, f"Paused by request after page {page}. {resume_hint}")
            return RunOutcome.PAUSED_BY_REQUEST

        limits = self.config.governor
        elapsed = self._clock() - started
        if elapsed > limits.max_processing_seconds:
            self._pause(
                doc,
                f"Paused after page {page}: {limits.max_processing_seconds:g}s time limit "
                f"reached. {resume_hint}",
            )
            return RunOutcome.PAUSED_TIME

        pressure = self._memory_probe()
        if pressure is not None and pressure > limits.memory_pressure_threshold:
            self._pause(
                doc,
                f"Paused after page {page}: memory pressure at {pressure:.0%} "
                f"(limit {limits.memory_pressure_threshold:.0%}). {resume_hint}",
            )
            return RunOutcome.PAUSED_MEMORY

        return None

    def _pause(self, doc: Document, message: str) -> None:
        doc.status = DocumentStatus.PAUSED
        doc.pause_message = message
        self._pause_requested = False
        logger.warning(f"{doc.label}: {message}")

    def _position(self, doc: Document) -> str:
        ids = list(self._states)
        return f"document {ids.index(doc.id) + 1}/{len(ids)}"

    def _summarize(self, outcome: RunOutcome | None) -> str:
        if not self._states:
            return IDLE
        if outcome is RunOutcome.CANCELLED:
            return "Cancelled"

        paused = [doc for doc in self.documents if doc.status is DocumentStatus.PAUSED]
        if paused:
            return f"Paused: {paused[-1].pause_message}"

        decisions = len(self.candidates.review_list())
        errors = sum(1 for doc in self.documents if doc.status is DocumentStatus.ERROR)
        summary = f"Done: {decisions} candidates from {len(self._states)} documents"
        if errors:
            summary += f" ({errors} failed)"
        return summary
