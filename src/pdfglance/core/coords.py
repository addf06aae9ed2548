"""Mapping between text offsets, bitmap pixels and PDF user space."""

import re

from pdfglance.models import PageSize, PdfPoint, PdfRect, Rect, ScreenPoint, ScreenRect

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _line_breaks(text: str) -> list[re.Match]:
    return list(_LINE_BREAK.finditer(text))


class CoordinateMapper:
    """Project search matches onto page bitmaps and screen points into PDF space.

    The forward projection is a layout-free approximation: the page is
    treated as ``line_count`` equal-height bands and every character as
    ``bitmap_width / len(text)`` pixels wide. It is good enough to draw a
    highlight near the hit, not to recover glyph boxes.

    The inverse projection scales both axes by ``pdf_width / screen_width``
    and ``pdf_height / screen_width`` respectively, then flips y so the
    origin moves from the top-left of the screen to the bottom-left of the
    page. With ``aspect_correct=True`` the y scale uses the page's rendered
    height instead of the screen width.
    """

    def __init__(self, aspect_correct: bool = False):
        self.aspect_correct = aspect_correct

    def match_to_rect(
        self,
        page_index: int,
        start: int,
        end: int,
        page_text: str,
        bitmap_width: int,
        bitmap_height: int,
    ) -> Rect:
        """Approximate highlight rectangle for ``page_text[start:end]``.

        Args:
            page_index: Page the match belongs to (for error messages).
            start: Match start offset.
            end: Match end offset (exclusive).
            page_text: Full extracted text of the page.
            bitmap_width: Width of the rendered page in pixels.
            bitmap_height: Height of the rendered page in pixels.

        Returns:
            Rectangle in the bitmap's pixel space, clamped to the bitmap.

        Raises:
            ValueError: If the offsets do not describe a non-empty range
                inside ``page_text`` or the bitmap has no area.
        """
        if not 0 <= start < end <= len(page_text):
            raise ValueError(
                f"Invalid match [{start}, {end}) on page {page_index} "
                f"(text length {len(page_text)})"
            )
        if bitmap_width <= 0 or bitmap_height <= 0:
            raise ValueError(f"Invalid bitmap size {bitmap_width}x{bitmap_height}")

        breaks = _line_breaks(page_text)
        line_height = bitmap_height / (len(breaks) + 1)
        char_density = bitmap_width / len(page_text)

        line_start = 0
        line_number = 0
        for brk in breaks:
            if brk.end() > start:
                break
            line_start = brk.end()
            line_number += 1

        left = (start - line_start) * char_density
        right = left + (end - start) * char_density
        top = line_number * line_height
        bottom = top + line_height

        return Rect(
            left=min(int(left), bitmap_width),
            top=min(int(top), bitmap_height),
            right=min(int(right), bitmap_width),
            bottom=min(int(bottom), bitmap_height),
        )

    def _ratios(self, page_size: PageSize, screen_width: float) -> tuple[float, float]:
        if screen_width <= 0:
            raise ValueError(f"screen_width must be positive, got {screen_width}")
        x_ratio = page_size.width / screen_width
        # Rendered height is pdf_height * screen_width / pdf_width, so the
        # aspect-correct y scale equals the x scale.
        y_ratio = x_ratio if self.aspect_correct else page_size.height / screen_width
        return x_ratio, y_ratio

    def screen_point_to_pdf_point(
        self, point: ScreenPoint, page_size: PageSize, screen_width: float
    ) -> PdfPoint:
        """Convert a screen-space point to PDF user space."""
        x_ratio, y_ratio = self._ratios(page_size, screen_width)
        return PdfPoint(
            x=point.x * x_ratio,
            y=page_size.height - point.y * y_ratio,
        )

    def pdf_point_to_screen_point(
        self, point: PdfPoint, page_size: PageSize, screen_width: float
    ) -> ScreenPoint:
        """Inverse of :meth:`screen_point_to_pdf_point`."""
        x_ratio, y_ratio = self._ratios(page_size, screen_width)
        return ScreenPoint(
            x=point.x / x_ratio,
            y=(page_size.height - point.y) / y_ratio,
        )

    def screen_rect_to_pdf_rect(
        self, rect: ScreenRect, page_size: PageSize, screen_width: float
    ) -> PdfRect:
        """Convert a drawn screen rectangle to a normalized PDF rectangle."""
        a = self.screen_point_to_pdf_point(rect.start, page_size, screen_width)
        b = self.screen_point_to_pdf_point(rect.end, page_size, screen_width)
        return PdfRect.from_points(a, b)

    def pdf_rect_to_screen_rect(
        self, rect: PdfRect, page_size: PageSize, screen_width: float
    ) -> ScreenRect:
        """Project a PDF rectangle back to screen space (top-left, bottom-right)."""
        top_left = self.pdf_point_to_screen_point(PdfPoint(rect.x0, rect.y1), page_size, screen_width)
        bottom_right = self.pdf_point_to_screen_point(PdfPoint(rect.x1, rect.y0), page_size, screen_width)
        return ScreenRect(top_left.x, top_left.y, bottom_right.x, bottom_right.y)
