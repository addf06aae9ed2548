"""Page rendering command."""

from pathlib import Path
from typing import Optional

import typer

from pdfglance.cli.utils import get_console
from pdfglance.config.settings import get_settings
from pdfglance.document import DocumentHandle
from pdfglance.render import PageRenderer


def render(
    pdf_path: Path = typer.Argument(..., help="PDF file"),
    page: int = typer.Argument(..., help="Page to render (0-indexed)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="PNG file to write (default: <stem>_p<page>.png).",
    ),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        "-w",
        min=1,
        help="Bitmap width in pixels (default from settings).",
    ),
):
    """Render one page to a PNG image.

    Example:

        pdfglance render report.pdf 0 -w 360 -o first.png
    """
    settings = get_settings()
    target_width = width or settings.render.width
    output = output or pdf_path.with_name(f"{pdf_path.stem}_p{page}.png")

    with DocumentHandle(pdf_path) as handle:
        rendered = PageRenderer(alpha=settings.render.alpha).render(handle, page, target_width)
    try:
        output.write_bytes(rendered.to_png())
    finally:
        rendered.release()

    get_console().print(f"[green]Rendered[/green] page {page} ({rendered.width}x{rendered.height}) -> {output}")
