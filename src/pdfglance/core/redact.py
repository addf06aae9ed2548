"""Write redacted copies of a document."""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

import fitz

from pdfglance.exceptions import EditError, OutOfRangeError, ResourceError
from pdfglance.models import PdfRect

logger = logging.getLogger(__name__)


def default_output_path(source: Path, suffix: str = "_redacted") -> Path:
    """Sibling path for the redacted copy: ``report.pdf`` -> ``report_redacted.pdf``."""
    return source.with_name(f"{source.stem}{suffix}{source.suffix or '.pdf'}")


def apply_redactions(
    source: Path,
    rects_by_page: Mapping[int, Sequence[PdfRect]],
    output_path: Path,
    fill_color: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> int:
    """Write a copy of ``source`` with opaque fills over the given rectangles.

    Content under each rectangle is removed (text, vector graphics and
    overlapping image pixels) and the area is painted with ``fill_color``.
    The source file is never modified; the output is written to a temporary
    sibling and renamed into place.

    Args:
        source: Original PDF.
        rects_by_page: Rectangles in points per 0-indexed page, origin at
            the bottom-left of the page as displayed (after any rotation).
        output_path: Destination file. Must differ from ``source``.
        fill_color: RGB components in ``[0, 1]``.

    Returns:
        Number of rectangles applied.

    Raises:
        EditError: If the output path is the source or cannot be written.
        ResourceError: If the source cannot be opened.
        OutOfRangeError: If a page index is outside the document.
    """
    source = Path(source)
    output_path = Path(output_path)
    if output_path.resolve() == source.resolve():
        raise EditError(
            f"Refusing to overwrite the original document: {source.name}",
            hint="Choose a different output path",
        )

    try:
        doc = fitz.open(source)
    except Exception as e:
        raise ResourceError(f"Cannot open document: {source.name}", details=str(e)) from e

    tmp_path = output_path.with_suffix(output_path.suffix + ".tmp")
    applied = 0
    try:
        for page_index in sorted(rects_by_page):
            rects = [r for r in rects_by_page[page_index] if not r.is_empty]
            if not rects:
                continue
            if not 0 <= page_index < doc.page_count:
                raise OutOfRangeError(
                    f"Page index {page_index} out of range",
                    details=f"Document has {doc.page_count} pages",
                )

            page = doc.load_page(page_index)
            # page.rect is the page as displayed, after /Rotate
            height = page.rect.height
            for rect in rects:
                shown = fitz.Rect(rect.x0, height - rect.y1, rect.x1, height - rect.y0)
                # Annotations take unrotated page coordinates
                page.add_redact_annot(shown * page.derotation_matrix, fill=fill_color)
                applied += 1
            page.apply_redactions(images=fitz.PDF_REDACT_IMAGE_PIXELS)

        try:
            doc.save(tmp_path, garbage=3, deflate=True)
            tmp_path.replace(output_path)
        except Exception as e:
            raise EditError(f"Failed to write {output_path.name}", details=str(e)) from e
    finally:
        doc.close()
        if tmp_path.exists():
            tmp_path.unlink()

    logger.info(f"Applied {applied} redactions to {source.name} -> {output_path}")
    return applied
