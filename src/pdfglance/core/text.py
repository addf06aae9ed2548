"""Per-page text extraction for search."""

import logging

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import ExtractionError
from pdfglance.extractors import Extractor, PdfPlumberExtractor

logger = logging.getLogger(__name__)


class TextExtractor:
    """Extract the plain text of every page, once per document.

    Failures never abort the document: a page without a readable text layer
    contributes an empty string, and if the backend cannot read the document
    at all every page is empty.
    """

    def __init__(self, backend: Extractor | None = None):
        """Initialize with an extraction backend.

        Args:
            backend: Object implementing the Extractor protocol.
                Defaults to PdfPlumberExtractor.
        """
        self.backend = backend if backend is not None else PdfPlumberExtractor()
        self._cache: dict[str, list[str]] = {}

    def extract_all(self, handle: DocumentHandle) -> list[str]:
        """Return one text per page index, in page order.

        The result is computed on the first call for a document and reused
        afterwards; treat it as immutable.
        """
        key = str(handle.path.resolve())
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            by_page = dict(self.backend.extract_text_by_page(handle))
        except ExtractionError as e:
            logger.warning(f"{e.message}; treating all {handle.page_count} pages as empty ({e.details})")
            by_page = {}

        texts = [by_page.get(i) or "" for i in range(handle.page_count)]
        empty = sum(1 for t in texts if not t)
        if empty:
            logger.debug(f"{empty} of {handle.page_count} pages have no extractable text")

        self._cache[key] = texts
        return texts

    def forget(self, handle: DocumentHandle) -> None:
        """Drop the memoized texts for ``handle``."""
        self._cache.pop(str(handle.path.resolve()), None)
