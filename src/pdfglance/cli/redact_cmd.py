"""Redaction command."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from pdfglance.cli.utils import parse_rect
from pdfglance.models import ScreenRect
from pdfglance.viewport import open_session

console = Console()


def redact(
    pdf_path: Path = typer.Argument(..., help="PDF file to redact (left untouched)"),
    rect: list[str] = typer.Option(
        ...,
        "--rect",
        "-r",
        help="Screen rectangle as page,x0,y0,x1,y1 (repeatable).",
    ),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        "-w",
        min=1,
        help="Screen width the rectangles were drawn at (default from settings).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output PDF (default: <stem>_redacted.pdf).",
    ),
):
    """Black out screen-space rectangles into a new PDF.

    Example:

        pdfglance redact report.pdf -w 360 -r 0,10,10,120,40 -o clean.pdf
    """
    parsed = [parse_rect(value) for value in rect]

    with open_session(pdf_path, width=width) as session:
        placed = []
        for page, x0, y0, x1, y1 in parsed:
            pdf_rect = session.add_selection(page, ScreenRect(x0, y0, x1, y1))
            placed.append({"page": page, "pdf_rect": [round(v, 2) for v in pdf_rect.to_tuple()]})
        written = session.apply_edits(output)

    console.print(json.dumps({"success": True, "output": str(written), "redactions": placed}, indent=2), soft_wrap=True)
