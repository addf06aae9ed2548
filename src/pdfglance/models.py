"""Value types shared across the rendering, search and mapping layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class PageSize:
    """Native page geometry in PDF points (rotation applied)."""

    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        """Height over width."""
        return self.height / self.width

    def scaled_height(self, target_width: int) -> int:
        """Bitmap height for a page rendered at ``target_width`` pixels (at least 1)."""
        return max(1, round(self.height * target_width / self.width))


@dataclass
class RenderedPage:
    """A rasterized page: ``width x height`` pixels, 4 bytes each.

    Channels are stored in RGBA byte order. Once inserted into a
    :class:`~pdfglance.cache.PageCache` the cache owns the buffer and may
    call :meth:`release` on eviction, after which ``samples`` is ``None``.
    """

    page_index: int
    width: int
    height: int
    samples: bytearray | None = field(repr=False)
    stride: int = 0
    alpha: bool = True

    def __post_init__(self) -> None:
        if not self.stride:
            self.stride = self.width * self.channels

    @property
    def channels(self) -> int:
        return 4 if self.alpha else 3

    @property
    def released(self) -> bool:
        return self.samples is None

    @property
    def nbytes(self) -> int:
        return 0 if self.samples is None else len(self.samples)

    def release(self) -> None:
        """Drop the pixel buffer immediately."""
        self.samples = None

    def to_png(self) -> bytes:
        """Encode the page as PNG.

        Raises:
            ValueError: If the buffer has already been released.
        """
        if self.samples is None:
            raise ValueError(f"Page {self.page_index} has been released")

        import fitz

        pix = fitz.Pixmap(fitz.csRGB, self.width, self.height, bytes(self.samples), self.alpha)
        return pix.tobytes("png")


@dataclass(frozen=True, order=True)
class Match:
    """A search hit: ``[start, end)`` character offsets into one page's text."""

    page_index: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"page": self.page_index, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class Rect:
    """Rectangle in a rendered bitmap's pixel space (origin top-left)."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class ScreenPoint:
    """Point in screen space (origin top-left, y grows downward)."""

    x: float
    y: float


@dataclass(frozen=True)
class ScreenRect:
    """A user-drawn rectangle in screen space, corners in any order."""

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def start(self) -> ScreenPoint:
        return ScreenPoint(self.x0, self.y0)

    @property
    def end(self) -> ScreenPoint:
        return ScreenPoint(self.x1, self.y1)


@dataclass(frozen=True)
class PdfPoint:
    """Point in PDF user space (origin bottom-left)."""

    x: float
    y: float


@dataclass(frozen=True)
class PdfRect:
    """Normalized rectangle in PDF user space (``x0 <= x1``, ``y0 <= y1``)."""

    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_points(cls, a: PdfPoint, b: PdfPoint) -> PdfRect:
        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @property
    def is_empty(self) -> bool:
        return self.x1 <= self.x0 or self.y1 <= self.y0

    def to_tuple(self) -> tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


class SlotState(str, Enum):
    """Lifecycle of one page slot in the viewport."""

    UNREQUESTED = "unrequested"
    RENDERING = "rendering"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Stroke:
    """A freehand line drawn over a page, in screen space.

    Strokes are a display overlay only; they are not written to the output
    document.
    """

    points: tuple[ScreenPoint, ...]
    color: tuple[float, float, float] = (1.0, 0.0, 0.0)
    width: float = 5.0

    def extended(self, point: ScreenPoint) -> Stroke:
        return Stroke(self.points + (point,), self.color, self.width)
