"""Text search command."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from pdfglance.cli.utils import is_quiet
from pdfglance.viewport import open_session

console = Console()


def search(
    pdf_path: Path = typer.Argument(..., help="PDF file to search"),
    query: str = typer.Argument(..., help="Text to find (literal, case-insensitive)"),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        "-w",
        min=1,
        help="Bitmap width used for highlight rectangles (default from settings).",
    ),
    rects: bool = typer.Option(
        False,
        "--rects",
        help="Include approximate highlight rectangles.",
    ),
    use_json: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
):
    """Find every occurrence of QUERY and list match locations.

    Examples:

        pdfglance search report.pdf revenue

        pdfglance search report.pdf "Q3 (draft)" --rects --json
    """
    with open_session(pdf_path, width=width) as session:
        matches = session.submit_query(query)
        texts = session.page_texts()
        rows = []
        for match in matches:
            row = match.to_dict()
            row["text"] = texts[match.page_index][match.start:match.end]
            rows.append(row)
        if rects:
            # highlights(i) lists rects in match order for page i
            per_page = {i: iter(session.highlights(i)) for i in session.match_pages()}
            for row in rows:
                row["rect"] = list(next(per_page[row["page"]]).to_tuple())
        pages = session.match_pages()

    if use_json:
        console.print(json.dumps({"query": query, "count": len(rows), "matches": rows}, indent=2), soft_wrap=True)
        return

    if not rows:
        if not is_quiet():
            console.print(f"[yellow]No matches for[/yellow] {query!r}")
        return

    table = Table(title=f"{len(rows)} matches for {query!r} on {len(pages)} pages")
    table.add_column("Page", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Text")
    if rects:
        table.add_column("Rect (l, t, r, b)")
    for row in rows:
        cells = [str(row["page"]), str(row["start"]), str(row["end"]), row["text"]]
        if rects:
            cells.append(", ".join(str(v) for v in row["rect"]))
        table.add_row(*cells)
    console.print(table)
