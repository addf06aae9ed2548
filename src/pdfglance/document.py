"""Read-only document handle backed by PyMuPDF."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import fitz

from pdfglance.exceptions import OutOfRangeError, ResourceError
from pdfglance.models import PageSize

logger = logging.getLogger(__name__)


class DocumentHandle:
    """An open, read-only PDF document.

    The handle owns the underlying file resource until :meth:`close` is
    called (or the ``with`` block exits). PyMuPDF documents are not safe for
    concurrent use, so callers that touch ``doc`` from worker threads must
    hold :attr:`lock`.

    Args:
        path: Path to the PDF file.

    Raises:
        ResourceError: If the file is missing, not a PDF, or cannot be parsed.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.lock = threading.RLock()

        if not self.path.is_file():
            raise ResourceError(f"Cannot open document: {self.path.name}", details="File not found")

        try:
            doc = fitz.open(self.path)
        except Exception as e:
            raise ResourceError(f"Cannot open document: {self.path.name}", details=str(e)) from e

        if not doc.is_pdf:
            fmt = (doc.metadata or {}).get("format") or "unknown"
            doc.close()
            raise ResourceError(
                f"Cannot open document: {self.path.name}",
                details=f"Unsupported document type: {fmt}",
            )

        self._doc: fitz.Document | None = doc
        self.page_count: int = doc.page_count
        self._sizes: dict[int, PageSize] = {}
        logger.debug(f"Opened {self.path.name} ({self.page_count} pages)")

    @property
    def closed(self) -> bool:
        return self._doc is None

    @property
    def doc(self) -> fitz.Document:
        """The underlying PyMuPDF document.

        Raises:
            ResourceError: If the handle has been closed.
        """
        if self._doc is None:
            raise ResourceError(f"Document already closed: {self.path.name}")
        return self._doc

    def check_index(self, page_index: int) -> None:
        """Raise :class:`OutOfRangeError` unless ``page_index`` is valid."""
        if not 0 <= page_index < self.page_count:
            raise OutOfRangeError(
                f"Page index {page_index} out of range",
                details=f"Document has {self.page_count} pages (valid range: 0-{self.page_count - 1})",
            )

    def page_size(self, page_index: int) -> PageSize:
        """Native page size in points, with the page rotation applied."""
        self.check_index(page_index)
        size = self._sizes.get(page_index)
        if size is None:
            with self.lock:
                rect = self.doc.load_page(page_index).rect
            size = PageSize(rect.width, rect.height)
            self._sizes[page_index] = size
        return size

    def close(self) -> None:
        """Release the document. Safe to call more than once."""
        with self.lock:
            if self._doc is not None:
                self._doc.close()
                self._doc = None
                logger.debug(f"Closed {self.path.name}")

    def __enter__(self) -> DocumentHandle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{self.page_count} pages"
        return f"DocumentHandle({self.path.name!r}, {state})"
