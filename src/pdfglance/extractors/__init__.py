"""Text extraction backends."""

from pdfglance.exceptions import ConfigError
from pdfglance.extractors.base import Extractor, text_or_empty
from pdfglance.extractors.pdfplumber import PdfPlumberExtractor
from pdfglance.extractors.pymupdf import PyMuPDFExtractor

_BACKENDS = {
    PdfPlumberExtractor.name: PdfPlumberExtractor,
    PyMuPDFExtractor.name: PyMuPDFExtractor,
}


def get_extractor(name: str) -> Extractor:
    """Instantiate an extraction backend by name.

    Raises:
        ConfigError: If no backend is registered under ``name``.
    """
    try:
        return _BACKENDS[name]()
    except KeyError:
        raise ConfigError(
            f"Unknown extraction backend: {name}",
            hint=f"Available backends: {', '.join(sorted(_BACKENDS))}",
        ) from None


__all__ = [
    "Extractor",
    "PdfPlumberExtractor",
    "PyMuPDFExtractor",
    "get_extractor",
    "text_or_empty",
]
