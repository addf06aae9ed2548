"""In-memory LRU cache of rendered pages."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import OrderedDict
from concurrent.futures import Executor, Future
from dataclasses import dataclass

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import ResourceError
from pdfglance.models import RenderedPage
from pdfglance.render.renderer import PageRenderer

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


@dataclass
class _Entry:
    page: RenderedPage
    tick: int


class PageCache:
    """Fixed-capacity, least-recently-used cache of rendered pages.

    Keys are page indices of a single document handle; the render width is
    fixed by the first fill and never mixed. Every hit or insert stamps the
    entry with the next value of a monotonic counter and the entry with the
    smallest stamp is evicted first. Evicted pages are released immediately.

    ``get_or_render`` is single-flight per page index: while a render for a
    page is in progress, other callers asking for the same page wait for that
    result instead of starting a second render.

    Example:
        >>> cache = PageCache(capacity=2)
        >>> page = cache.get_or_render(handle, 0, 360)
        >>> cache.get(0) is page
        True
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, renderer: PageRenderer | None = None):
        """Initialize the cache.

        Args:
            capacity: Maximum number of resident pages.
            renderer: Fill function used on misses. Defaults to PageRenderer().
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.renderer = renderer if renderer is not None else PageRenderer()
        self.width: int | None = None
        self.renders = 0
        self.hits = 0
        self.misses = 0

        self._entries: OrderedDict[int, _Entry] = OrderedDict()
        self._inflight: dict[int, Future] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, page_index: int) -> RenderedPage | None:
        """Look up a page without rendering; refreshes recency on a hit."""
        with self._lock:
            entry = self._entries.get(page_index)
            if entry is None:
                return None
            self._touch(page_index, entry)
            return entry.page

    def put(self, page_index: int, page: RenderedPage) -> None:
        """Insert a page, evicting the least recently used entry if full.

        After :meth:`close` the page is released instead of inserted.
        """
        with self._lock:
            self._insert(page_index, page)

    def get_or_render(
        self, handle: DocumentHandle, page_index: int, target_width: int
    ) -> RenderedPage:
        """Return the cached page, rendering and inserting it on a miss.

        Raises:
            ResourceError: If the cache has been closed.
            ValueError: If ``target_width`` differs from the cache's width.
            OutOfRangeError: If ``page_index`` is invalid.
            RenderError: If the page cannot be rendered. Failures are not
                cached; waiters on the same render receive the same error.
        """
        with self._lock:
            if self._closed:
                raise ResourceError("Page cache is closed")
            self._check_width(target_width)

            entry = self._entries.get(page_index)
            if entry is not None:
                self.hits += 1
                self._touch(page_index, entry)
                logger.debug(f"Cache hit for page {page_index}")
                return entry.page

            pending = self._inflight.get(page_index)
            owner = pending is None
            if owner:
                self.misses += 1
                pending = Future()
                pending.set_running_or_notify_cancel()
                self._inflight[page_index] = pending

        if not owner:
            logger.debug(f"Waiting on in-flight render of page {page_index}")
            return pending.result()

        try:
            page = self.renderer.render(handle, page_index, target_width)
        except BaseException as e:
            with self._lock:
                self._inflight.pop(page_index, None)
            pending.set_exception(e)
            raise

        with self._lock:
            self.renders += 1
            self._inflight.pop(page_index, None)
            # A render finishing after either close() stays with the caller
            if not self._closed and not handle.closed:
                self._insert(page_index, page)
        pending.set_result(page)
        return page

    def get_or_render_async(
        self,
        executor: Executor,
        handle: DocumentHandle,
        page_index: int,
        target_width: int,
    ) -> Future:
        """Schedule :meth:`get_or_render` on ``executor``.

        Hits are answered with an already-completed future without touching
        the executor.
        """
        page = self.get(page_index)
        if page is not None:
            done: Future = Future()
            done.set_result(page)
            return done
        return executor.submit(self.get_or_render, handle, page_index, target_width)

    def recency(self, page_index: int) -> int | None:
        """Counter value of the last access to ``page_index``, if resident."""
        with self._lock:
            entry = self._entries.get(page_index)
            return entry.tick if entry else None

    def keys(self) -> list[int]:
        """Resident page indices, least recently used first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Release and drop every resident page."""
        with self._lock:
            self._release_all()

    def close(self) -> None:
        """Release all pages and refuse further inserts."""
        with self._lock:
            self._closed = True
            self._release_all()

    def stats(self) -> dict[str, int | None]:
        with self._lock:
            return {
                "capacity": self.capacity,
                "size": len(self._entries),
                "width": self.width,
                "renders": self.renders,
                "hits": self.hits,
                "misses": self.misses,
                "resident_bytes": sum(e.page.nbytes for e in self._entries.values()),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, page_index: object) -> bool:
        with self._lock:
            return page_index in self._entries

    # Internal helpers; callers hold self._lock.

    def _check_width(self, target_width: int) -> None:
        if self.width is None:
            self.width = target_width
        elif target_width != self.width:
            raise ValueError(
                f"Cache holds pages rendered at width {self.width}, got {target_width}; "
                "clear() before changing the render width"
            )

    def _touch(self, page_index: int, entry: _Entry) -> None:
        entry.tick = next(self._counter)
        self._entries.move_to_end(page_index)

    def _insert(self, page_index: int, page: RenderedPage) -> None:
        if self._closed:
            logger.debug(f"Discarding page {page_index}: cache closed")
            page.release()
            return

        existing = self._entries.pop(page_index, None)
        if existing is not None and existing.page is not page:
            existing.page.release()

        while len(self._entries) >= self.capacity:
            evicted_index, evicted = self._entries.popitem(last=False)
            evicted.page.release()
            logger.debug(f"Evicted page {evicted_index} (tick {evicted.tick})")

        self._entries[page_index] = _Entry(page=page, tick=next(self._counter))

    def _release_all(self) -> None:
        for entry in self._entries.values():
            entry.page.release()
        self._entries.clear()
        self.width = None
