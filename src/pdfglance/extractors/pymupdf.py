"""Text extraction backend using PyMuPDF."""

from pdfglance.document import DocumentHandle
from pdfglance.extractors.base import text_or_empty


class PyMuPDFExtractor:
    """Text extraction backend reading the already open PyMuPDF document."""

    name = "pymupdf"

    def __init__(self, sort: bool = False):
        """Initialize the extractor.

        Args:
            sort: Reorder text blocks top-left to bottom-right instead of
                keeping content-stream order.
        """
        self.sort = sort

    def extract_text_by_page(self, handle: DocumentHandle) -> list[tuple[int, str]]:
        """Extract text from PDF, returning per-page results."""
        results = []
        with handle.lock:
            doc = handle.doc
            for page_idx in range(handle.page_count):
                text = text_or_empty(
                    page_idx,
                    lambda page_idx=page_idx: doc.load_page(page_idx).get_text("text", sort=self.sort),
                )
                results.append((page_idx, text))
        return results
