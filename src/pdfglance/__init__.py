"""pdfglance: on-demand PDF page rendering, search highlights and redaction.

This module provides a Python API for:
- Rendering PDF pages to bitmaps at a fixed width, with an LRU page cache
- Extracting page text and finding literal, case-insensitive matches
- Projecting matches onto page bitmaps as highlight rectangles
- Turning screen-space selections into opaque redactions in a new PDF

Simple API (recommended for most users):
    >>> from pdfglance import open_session
    >>>
    >>> with open_session("report.pdf", width=360) as session:
    ...     session.request_visible(0, 1)
    ...     matches = session.submit_query("revenue")
    ...     rects = session.highlights(matches[0].page_index)

Advanced usage (for more control):
    >>> from pdfglance import DocumentHandle, PageCache, SearchEngine, TextExtractor
    >>>
    >>> with DocumentHandle("report.pdf") as handle:
    ...     cache = PageCache(capacity=4)
    ...     page = cache.get_or_render(handle, 0, 360)
    ...     texts = TextExtractor().extract_all(handle)
    ...     matches = SearchEngine().search("revenue", texts)
"""

__version__ = "0.3.0"

from pdfglance.cache import PageCache
from pdfglance.config.settings import Settings, get_settings
from pdfglance.core import (
    CoordinateMapper,
    SearchEngine,
    TextExtractor,
    apply_redactions,
)
from pdfglance.document import DocumentHandle
from pdfglance.exceptions import (
    ConfigError,
    EditError,
    ExtractionError,
    OutOfRangeError,
    PdfGlanceError,
    RenderError,
    ResourceError,
)
from pdfglance.extractors import PdfPlumberExtractor, PyMuPDFExtractor
from pdfglance.models import (
    Match,
    PageSize,
    PdfPoint,
    PdfRect,
    Rect,
    RenderedPage,
    ScreenPoint,
    ScreenRect,
    SlotState,
    Stroke,
)
from pdfglance.render import PageRenderer
from pdfglance.viewport import Session, ViewportController, open_session

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "PdfGlanceError",
    "OutOfRangeError",
    "RenderError",
    "ExtractionError",
    "ResourceError",
    "EditError",
    "ConfigError",
    # Documents and rendering
    "DocumentHandle",
    "PageRenderer",
    "PageCache",
    # Text and search
    "TextExtractor",
    "PdfPlumberExtractor",
    "PyMuPDFExtractor",
    "SearchEngine",
    # Geometry
    "CoordinateMapper",
    "apply_redactions",
    # Session
    "ViewportController",
    "Session",
    "open_session",
    # Models
    "Match",
    "PageSize",
    "PdfPoint",
    "PdfRect",
    "Rect",
    "RenderedPage",
    "ScreenPoint",
    "ScreenRect",
    "SlotState",
    "Stroke",
    # Configuration
    "Settings",
    "get_settings",
]
