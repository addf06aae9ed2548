"""Text extraction backend using pdfplumber."""

import pdfplumber

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import ExtractionError
from pdfglance.extractors.base import text_or_empty


class PdfPlumberExtractor:
    """Text extraction backend using the pdfplumber library.

    Text is read in content-stream order without layout padding so that
    character offsets line up with what a user would type in a search box.
    """

    name = "pdfplumber"

    def __init__(self, x_tolerance: float = 3, y_tolerance: float = 3):
        """Initialize the extractor.

        Args:
            x_tolerance: Horizontal gap (points) below which characters join a word.
            y_tolerance: Vertical gap (points) below which characters share a line.
        """
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def extract_text_by_page(self, handle: DocumentHandle) -> list[tuple[int, str]]:
        """Extract text from PDF, returning per-page results.

        Args:
            handle: Open document handle; pdfplumber reads ``handle.path``.

        Returns:
            List of (page_number, text) tuples where page_number is 0-indexed.

        Raises:
            ExtractionError: If pdfplumber cannot open the document.
        """
        try:
            pdf = pdfplumber.open(handle.path)
        except Exception as e:
            raise ExtractionError(
                f"Failed to extract text from {handle.path.name}",
                details=str(e),
            ) from e

        with pdf:
            results = []
            for page_idx, page in enumerate(pdf.pages):
                text = text_or_empty(
                    page_idx,
                    lambda page=page: page.extract_text(
                        x_tolerance=self.x_tolerance,
                        y_tolerance=self.y_tolerance,
                    ),
                )
                results.append((page_idx, text))
                # Parsed layout objects are large; drop them page by page
                page.close()
            return results
