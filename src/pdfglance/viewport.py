"""Viewing session: lazy page rendering, search highlights and redaction edits."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from pathlib import Path

from pdfglance.cache import PageCache
from pdfglance.config.settings import Settings, get_settings
from pdfglance.core.coords import CoordinateMapper
from pdfglance.core.redact import apply_redactions, default_output_path
from pdfglance.core.search import SearchEngine
from pdfglance.core.text import TextExtractor
from pdfglance.document import DocumentHandle
from pdfglance.exceptions import RenderError, ResourceError
from pdfglance.extractors import get_extractor
from pdfglance.models import (
    Match,
    PdfRect,
    Rect,
    RenderedPage,
    ScreenPoint,
    ScreenRect,
    SlotState,
    Stroke,
)
from pdfglance.render import PageRenderer

logger = logging.getLogger(__name__)

PageCallback = Callable[[int, RenderedPage], None]
FailureCallback = Callable[[int, RenderError], None]


@dataclass
class PageSlot:
    """Render state of one page."""

    state: SlotState = SlotState.UNREQUESTED
    generation: int = 0
    error: RenderError | None = None
    future: Future | None = field(default=None, repr=False)


@dataclass(frozen=True)
class _QueryResult:
    query: str
    matches: tuple[Match, ...]
    highlights: dict[int, tuple[Rect, ...]]


_EMPTY_QUERY = _QueryResult("", (), {})


class ViewportController:
    """Drive rendering, search and edits for one open document.

    The controller owns its :class:`~pdfglance.cache.PageCache` and a small
    thread pool; the document handle is owned by the caller unless the
    controller was created through :func:`open_session`. Renders are started
    only for pages in (or near) the visible range and each page slot moves
    ``UNREQUESTED -> RENDERING -> READY | FAILED``. Failed pages stay failed
    until :meth:`retry` or :meth:`reload`.

    Text extraction and queries run on a separate single worker, so a search
    never blocks the thread that declares visible pages. Extraction starts
    with the first :meth:`request_visible`.

    Args:
        handle: Open document.
        settings: Configuration. Defaults to get_settings().
        width: Render width in pixels; overrides ``settings.render.width``.
        cache: Page cache to use; a new one is created by default.
        extractor: Text extractor; built from ``settings.extraction.backend``
            by default.
        on_page_ready: Called from a worker thread when a slot becomes READY.
        on_page_failed: Called from a worker thread when a slot becomes FAILED.
    """

    def __init__(
        self,
        handle: DocumentHandle,
        settings: Settings | None = None,
        width: int | None = None,
        cache: PageCache | None = None,
        extractor: TextExtractor | None = None,
        on_page_ready: PageCallback | None = None,
        on_page_failed: FailureCallback | None = None,
    ):
        settings = settings or get_settings()
        self.handle = handle
        self.width = width or settings.render.width
        self.buffer_pages = settings.render.buffer_pages
        self.fill_color = settings.edits.fill_color
        self.output_suffix = settings.edits.suffix
        self.on_page_ready = on_page_ready
        self.on_page_failed = on_page_failed

        self.stroke_color = settings.draw.color
        self.stroke_width = settings.draw.width

        # PageCache has __len__, so an empty cache is falsy
        if cache is None:
            cache = PageCache(
                capacity=settings.cache.capacity,
                renderer=PageRenderer(alpha=settings.render.alpha),
            )
        self.cache = cache
        if extractor is None:
            extractor = TextExtractor(get_extractor(settings.extraction.backend))
        self.extractor = extractor
        self.search_engine = SearchEngine()
        self.mapper = CoordinateMapper(aspect_correct=settings.coords.aspect_correct)

        self._executor = ThreadPoolExecutor(
            max_workers=settings.render.max_in_flight,
            thread_name_prefix="pdfglance-render",
        )
        # Text extraction and queries run here, in submission order
        self._text_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdfglance-text")
        self._lock = threading.Lock()
        self._slots = [PageSlot() for _ in range(handle.page_count)]
        self._window: set[int] = set()
        self._query = _EMPTY_QUERY
        self._query_seq = 0
        self._texts_future: Future | None = None
        self._selections: dict[int, list[PdfRect]] = {}
        self._strokes: dict[int, list[Stroke]] = {}
        self._closed = False

    @property
    def page_count(self) -> int:
        return self.handle.page_count

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def request_visible(self, first: int, last: int) -> list[int]:
        """Declare pages ``first..last`` (inclusive) visible.

        Pages within ``buffer_pages`` of the range are requested too. Pages
        outside the new window keep any render already running, but its
        result is no longer delivered to the slot.

        Returns:
            Page indices for which a render was started.
        """
        self._ensure_open()
        if self.page_count == 0:
            return []
        self.handle.check_index(first)
        self.handle.check_index(last)
        if last < first:
            first, last = last, first

        start = max(0, first - self.buffer_pages)
        end = min(self.page_count - 1, last + self.buffer_pages)

        started = []
        with self._lock:
            self._window = set(range(start, end + 1))
            self._cancel_outside_window()
            for page_index in sorted(self._window):
                state = self._slots[page_index].state
                # READY pages evicted from the cache are filled again
                if state is SlotState.UNREQUESTED or (
                    state is SlotState.READY and page_index not in self.cache
                ):
                    self._start_render(page_index)
                    started.append(page_index)
        # Queue text extraction behind the first renders
        self.prefetch_text()
        return started

    def retry(self, page_index: int) -> bool:
        """Re-request a FAILED page. Returns False if the page was not failed."""
        self._ensure_open()
        self.handle.check_index(page_index)
        with self._lock:
            if self._slots[page_index].state is not SlotState.FAILED:
                return False
            self._window.add(page_index)
            self._start_render(page_index)
        return True

    def reload(self) -> None:
        """Reset every slot to UNREQUESTED and drop all cached pages."""
        self._ensure_open()
        with self._lock:
            for slot in self._slots:
                slot.generation += 1
                slot.state = SlotState.UNREQUESTED
                slot.error = None
                slot.future = None
            self._window.clear()
        self.cache.clear()

    def state(self, page_index: int) -> SlotState:
        self.handle.check_index(page_index)
        return self._slots[page_index].state

    def error(self, page_index: int) -> RenderError | None:
        self.handle.check_index(page_index)
        return self._slots[page_index].error

    def page(self, page_index: int) -> RenderedPage | None:
        """Cached page for display, or None. Never renders."""
        self.handle.check_index(page_index)
        if self._slots[page_index].state is not SlotState.READY:
            return None
        return self.cache.get(page_index)

    def wait(self, page_index: int, timeout: float | None = None) -> SlotState:
        """Block until the pending render of ``page_index`` has been handled."""
        self.handle.check_index(page_index)
        future = self._slots[page_index].future
        if future is not None:
            wait_futures([future], timeout=timeout)
        return self._slots[page_index].state

    def _start_render(self, page_index: int) -> None:
        # Caller holds self._lock
        slot = self._slots[page_index]
        slot.generation += 1
        slot.state = SlotState.RENDERING
        slot.error = None
        generation = slot.generation
        slot.future = self._executor.submit(self._render_slot, page_index, generation)

    def _cancel_outside_window(self) -> None:
        # Caller holds self._lock. Only queued renders can be cancelled;
        # running ones finish and are discarded in _render_slot.
        for page_index, slot in enumerate(self._slots):
            if page_index in self._window or slot.state is not SlotState.RENDERING:
                continue
            if slot.future is not None and slot.future.cancel():
                slot.generation += 1
                slot.state = SlotState.UNREQUESTED
                slot.future = None
                logger.debug(f"Cancelled queued render of page {page_index}")

    def _render_slot(self, page_index: int, generation: int) -> None:
        with self._lock:
            if self._stale(page_index, generation):
                return
            if page_index not in self._window:
                # Scrolled away before the worker picked it up
                self._slots[page_index].state = SlotState.UNREQUESTED
                return

        try:
            page = self.cache.get_or_render(self.handle, page_index, self.width)
        except Exception as e:
            if isinstance(e, ResourceError) and self._closed:
                logger.debug(f"Session closed while rendering page {page_index}")
                return
            if not isinstance(e, RenderError):
                e = RenderError(
                    f"Failed to render page {page_index} of {self.handle.path.name}",
                    page_index=page_index,
                    details=f"{type(e).__name__}: {e}",
                )
            self._finish_failed(page_index, generation, e)
            return

        with self._lock:
            if self._closed:
                # Not cached after close, so nobody else holds this page
                page.release()
                return
            if self._stale(page_index, generation):
                logger.debug(f"Discarding stale render of page {page_index}")
                return
            if page_index not in self._window:
                self._slots[page_index].state = SlotState.UNREQUESTED
                return
            self._slots[page_index].state = SlotState.READY

        if self.on_page_ready is not None:
            self.on_page_ready(page_index, page)

    def _finish_failed(self, page_index: int, generation: int, error: RenderError) -> None:
        with self._lock:
            if self._stale(page_index, generation):
                return
            slot = self._slots[page_index]
            slot.state = SlotState.FAILED
            slot.error = error
        logger.warning(f"{error.message}: {error.details}")
        if self.on_page_failed is not None:
            self.on_page_failed(page_index, error)

    def _stale(self, page_index: int, generation: int) -> bool:
        return self._closed or self._slots[page_index].generation != generation

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def prefetch_text(self) -> Future:
        """Start extracting the text of every page in the background.

        Extraction runs once per session on the ``pdfglance-text`` worker;
        later calls return the same future.

        Returns:
            Future resolving to one text per page index.
        """
        with self._lock:
            self._ensure_open()
            if self._texts_future is None:
                self._texts_future = self._text_executor.submit(self.extractor.extract_all, self.handle)
            return self._texts_future

    def page_texts(self) -> list[str]:
        """Extracted text of every page. Blocks until extraction has finished."""
        return self.prefetch_text().result()

    def submit_query_async(self, query: str) -> Future:
        """Run a search on the text worker and replace the current highlights.

        Queries are handled in submission order. A result is installed only
        if no newer query was submitted in the meantime.

        Returns:
            Future resolving to the query's matches.
        """
        texts_future = self.prefetch_text()
        with self._lock:
            self._query_seq += 1
            seq = self._query_seq
            # Queued behind the extraction on the same single worker
            return self._text_executor.submit(self._run_query, query, seq, texts_future)

    def submit_query(self, query: str) -> list[Match]:
        """Run a search and replace the current highlight set.

        The previous query's matches and highlights are dropped in one step;
        they are never merged with the new ones.
        """
        return self.submit_query_async(query).result()

    def _run_query(self, query: str, seq: int, texts_future: Future) -> list[Match]:
        texts = texts_future.result()
        matches = self.search_engine.search(query, texts)

        highlights: dict[int, list[Rect]] = {}
        for match in matches:
            bitmap_height = self.handle.page_size(match.page_index).scaled_height(self.width)
            rect = self.mapper.match_to_rect(
                match.page_index,
                match.start,
                match.end,
                texts[match.page_index],
                self.width,
                bitmap_height,
            )
            highlights.setdefault(match.page_index, []).append(rect)

        result = _QueryResult(
            query=query,
            matches=tuple(matches),
            highlights={i: tuple(rects) for i, rects in highlights.items()},
        )
        with self._lock:
            if seq != self._query_seq:
                logger.debug(f"Dropping superseded query {query!r}")
                return matches
            self._query = result
        logger.debug(f"Query {query!r}: {len(matches)} matches on {len(highlights)} pages")
        return matches

    def clear_query(self) -> None:
        with self._lock:
            # Anything still queued is now superseded
            self._query_seq += 1
            self._query = _EMPTY_QUERY

    @property
    def query(self) -> str:
        return self._query.query

    @property
    def matches(self) -> list[Match]:
        return list(self._query.matches)

    @property
    def match_count(self) -> int:
        return len(self._query.matches)

    def match_pages(self) -> dict[int, int]:
        """Page index -> number of matches, for jump-to-match navigation."""
        return SearchEngine.pages_with_matches(self._query.matches)

    def highlights(self, page_index: int) -> list[Rect]:
        """Highlight rectangles of the current query on ``page_index``."""
        self.handle.check_index(page_index)
        return list(self._query.highlights.get(page_index, ()))

    # ------------------------------------------------------------------
    # Selections and edits
    # ------------------------------------------------------------------

    def add_selection(self, page_index: int, rect: ScreenRect) -> PdfRect:
        """Record a screen-space selection on a page as a pending redaction."""
        self._ensure_open()
        pdf_rect = self.mapper.screen_rect_to_pdf_rect(rect, self.handle.page_size(page_index), self.width)
        self._selections.setdefault(page_index, []).append(pdf_rect)
        return pdf_rect

    def selections(self, page_index: int) -> list[PdfRect]:
        """Pending selections on one page, in the order they were drawn."""
        self.handle.check_index(page_index)
        return list(self._selections.get(page_index, []))

    def all_selections(self) -> dict[int, list[PdfRect]]:
        return {i: list(rects) for i, rects in sorted(self._selections.items())}

    def clear_selections(self) -> None:
        self._selections.clear()

    def apply_edits(self, output_path: Path | str | None = None) -> Path:
        """Write a redacted copy of the document and clear pending selections.

        Args:
            output_path: Destination; defaults to ``<stem>_redacted.pdf``
                next to the source.

        Returns:
            Path of the written document.
        """
        self._ensure_open()
        target = Path(output_path) if output_path else default_output_path(self.handle.path, self.output_suffix)
        apply_redactions(self.handle.path, self._selections, target, fill_color=self.fill_color)
        self._selections.clear()
        return target

    # ------------------------------------------------------------------
    # Strokes
    # ------------------------------------------------------------------

    def add_stroke(self, page_index: int, points: Iterable[ScreenPoint]) -> Stroke:
        """Record a finished freehand stroke on a page.

        Strokes are drawn over the page bitmap only and are kept across
        :meth:`apply_edits`.

        Raises:
            ValueError: If ``points`` is empty.
        """
        self._ensure_open()
        self.handle.check_index(page_index)
        points = tuple(points)
        if not points:
            raise ValueError("A stroke needs at least one point")
        stroke = Stroke(points, color=self.stroke_color, width=self.stroke_width)
        self._strokes.setdefault(page_index, []).append(stroke)
        return stroke

    def begin_stroke(self, page_index: int, point: ScreenPoint) -> Stroke:
        """Start a new stroke at ``point``, as on pointer-down."""
        return self.add_stroke(page_index, [point])

    def extend_stroke(self, page_index: int, point: ScreenPoint) -> Stroke:
        """Append ``point`` to the most recent stroke on a page, as on pointer-move."""
        self._ensure_open()
        self.handle.check_index(page_index)
        strokes = self._strokes.get(page_index)
        if not strokes:
            raise ValueError(f"No stroke in progress on page {page_index}")
        strokes[-1] = strokes[-1].extended(point)
        return strokes[-1]

    def strokes(self, page_index: int) -> list[Stroke]:
        self.handle.check_index(page_index)
        return list(self._strokes.get(page_index, []))

    def all_strokes(self) -> dict[int, list[Stroke]]:
        return {i: list(strokes) for i, strokes in sorted(self._strokes.items())}

    def clear_strokes(self, page_index: int | None = None) -> None:
        """Drop the strokes of one page, or of every page."""
        if page_index is None:
            self._strokes.clear()
            return
        self.handle.check_index(page_index)
        self._strokes.pop(page_index, None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise ResourceError("Viewing session is closed")

    def close(self) -> None:
        """Stop the session. Running renders finish but their results are dropped."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._window.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._text_executor.shutdown(wait=False, cancel_futures=True)
        self.cache.close()

    def __enter__(self) -> ViewportController:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Session(ViewportController):
    """Controller that also owns its document handle."""

    def close(self) -> None:
        try:
            super().close()
        finally:
            # Blocks until a running render lets go of the document
            self.handle.close()


def open_session(path: Path | str, settings: Settings | None = None, **kwargs) -> Session:
    """Open a document and a viewing session over it.

    The handle is closed again if the session cannot be constructed.

    Raises:
        ResourceError: If the document cannot be opened.
    """
    handle = DocumentHandle(path)
    try:
        return Session(handle, settings=settings, **kwargs)
    except BaseException:
        handle.close()
        raise
