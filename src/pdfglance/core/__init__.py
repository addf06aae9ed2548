"""Search, text extraction, coordinate mapping and redaction."""

from pdfglance.core.coords import CoordinateMapper
from pdfglance.core.redact import apply_redactions, default_output_path
from pdfglance.core.search import SearchEngine
from pdfglance.core.text import TextExtractor

__all__ = [
    "CoordinateMapper",
    "SearchEngine",
    "TextExtractor",
    "apply_redactions",
    "default_output_path",
]
