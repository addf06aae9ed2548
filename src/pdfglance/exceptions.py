"""Custom exceptions for pdfglance.

Every error carries a short ``message``, optional ``details`` and a
``hint`` for the user; the CLI exits with the class's ``exit_code``.
"""


class PdfGlanceError(Exception):
    """Base exception for all pdfglance errors."""

    exit_code: int = 1
    default_hint: str | None = None

    def __init__(
        self,
        message: str,
        details: str | None = None,
        hint: str | None = None,
    ):
        self.message = message
        self.details = details
        self.hint = hint or self.default_hint
        super().__init__(message)


class PageError(PdfGlanceError):
    """Error tied to one page; ``page_index`` is None for document-wide failures."""

    def __init__(self, message: str, page_index: int | None = None, **kwargs):
        self.page_index = page_index
        super().__init__(message, **kwargs)


# Page addressing errors (10-19)
class OutOfRangeError(PdfGlanceError):
    """Page index outside [0, page_count)."""

    exit_code = 10
    default_hint = "Page numbers are 0-indexed; run `pdfglance info` for the page count"


# Rendering errors (20-29)
class RenderError(PageError):
    """A single page could not be rasterized."""

    exit_code = 20


# Extraction errors (30-39)
class ExtractionError(PageError):
    """Text could not be read from a page or document."""

    exit_code = 30
    default_hint = "The page may be scanned/image-only. OCR is not supported."


# Document errors (40-49)
class ResourceError(PdfGlanceError):
    """Document cannot be opened (or is already closed)."""

    exit_code = 40
    default_hint = "Ensure the file exists and is a valid PDF document"


# Output errors (50-59)
class EditError(PdfGlanceError):
    """Redacted output document could not be written."""

    exit_code = 50
    default_hint = "Check that the output directory exists and is writable"


# Configuration errors (60-69)
class ConfigError(PdfGlanceError):
    """Unknown backend name or invalid setting."""

    exit_code = 60
    default_hint = "Check PDFGLANCE_* environment variables or ~/.pdfglance/config.yaml"
