"""Document info command."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pdfglance.document import DocumentHandle

console = Console()


def info(
    pdf_path: Path = typer.Argument(..., help="PDF file to inspect"),
    use_json: bool = typer.Option(False, "--json", help="Output as JSON."),
):
    """Show page count and native page sizes.

    Example:

        pdfglance info report.pdf
    """
    with DocumentHandle(pdf_path) as handle:
        pages = [
            {"page": i, "width": round(size.width, 2), "height": round(size.height, 2)}
            for i, size in ((i, handle.page_size(i)) for i in range(handle.page_count))
        ]

    if use_json:
        console.print(json.dumps({"file": pdf_path.name, "pages": len(pages), "sizes": pages}, indent=2), soft_wrap=True)
        return

    table = Table(title=f"{pdf_path.name} ({len(pages)} pages)")
    table.add_column("Page", justify="right")
    table.add_column("Width (pt)", justify="right")
    table.add_column("Height (pt)", justify="right")
    for row in pages:
        table.add_row(str(row["page"]), f"{row['width']:g}", f"{row['height']:g}")
    console.print(table)
