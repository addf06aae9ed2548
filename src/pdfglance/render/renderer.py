"""Page rasterization using PyMuPDF."""

import logging
import time

import fitz

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import RenderError
from pdfglance.models import RenderedPage

logger = logging.getLogger(__name__)

_EDGE = 1e-4


class PageRenderer:
    """Rasterize single pages of an open document to a fixed pixel width.

    The output keeps the page's native aspect ratio: for a page of
    ``w x h`` points rendered at ``target_width`` pixels the bitmap is
    ``target_width x round(h * target_width / w)``.
    """

    def __init__(self, alpha: bool = True):
        """Initialize the renderer.

        Args:
            alpha: Render with an alpha channel (4 bytes per pixel). When
                False the bitmap is RGB and the page background is white.
        """
        self.alpha = alpha

    def render(self, handle: DocumentHandle, page_index: int, target_width: int) -> RenderedPage:
        """Render one page.

        Args:
            handle: Open document handle. It is not closed by this call.
            page_index: 0-indexed page number.
            target_width: Output bitmap width in pixels.

        Returns:
            The rendered page.

        Raises:
            OutOfRangeError: If ``page_index`` is outside ``[0, page_count)``.
            ValueError: If ``target_width`` is not a positive integer.
            ResourceError: If the handle has been closed.
            RenderError: If the page cannot be rasterized.
        """
        handle.check_index(page_index)
        if isinstance(target_width, bool) or not isinstance(target_width, int) or target_width <= 0:
            raise ValueError(f"target_width must be a positive integer, got {target_width!r}")

        started = time.perf_counter()
        with handle.lock:
            doc = handle.doc
            try:
                page = doc.load_page(page_index)
                size = handle.page_size(page_index)
                target_height = size.scaled_height(target_width)
                # Scale a hair under the target so float error never adds a pixel row
                matrix = fitz.Matrix(
                    (target_width - _EDGE) / size.width,
                    (target_height - _EDGE) / size.height,
                )
                pix = page.get_pixmap(matrix=matrix, alpha=self.alpha)
                samples = bytearray(pix.samples)
                rendered = RenderedPage(
                    page_index=page_index,
                    width=pix.width,
                    height=pix.height,
                    samples=samples,
                    stride=pix.stride,
                    alpha=self.alpha,
                )
            except Exception as e:
                raise RenderError(
                    f"Failed to render page {page_index} of {handle.path.name}",
                    page_index=page_index,
                    details=str(e),
                ) from e
            finally:
                # Drop per-page resources while the lock is still held
                page = pix = None

        logger.debug(
            f"Rendered page {page_index} at {rendered.width}x{rendered.height} "
            f"in {(time.perf_counter() - started) * 1000:.1f} ms"
        )
        return rendered
