"""Base protocol for text extraction backends."""

import logging
from collections.abc import Callable
from typing import Protocol

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import ExtractionError

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    """Protocol defining the interface for text extraction backends."""

    name: str

    def extract_text_by_page(self, handle: DocumentHandle) -> list[tuple[int, str]]:
        """Extract text from every page of a document.

        Args:
            handle: Open document handle.

        Returns:
            List of (page_number, text) tuples where page_number is 0-indexed.
            Pages whose text layer cannot be read map to an empty string.

        Raises:
            ExtractionError: If the document as a whole cannot be read.
        """
        ...


def text_or_empty(page_index: int, extract: Callable[[], str | None]) -> str:
    """Run a single-page extraction, mapping failures to an empty string.

    Args:
        page_index: 0-indexed page number (for logging).
        extract: Zero-argument callable returning the page text.

    Returns:
        The page text, or "" when extraction raised or returned nothing.
    """
    try:
        return extract() or ""
    except Exception as e:
        error = e if isinstance(e, ExtractionError) else ExtractionError(
            f"Failed to extract text from page {page_index}",
            page_index=page_index,
            details=str(e),
        )
        logger.warning(f"{error.message}; using empty text ({error.details or error.hint})")
        return ""
