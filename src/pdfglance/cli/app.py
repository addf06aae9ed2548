"""Typer application for the pdfglance CLI."""

import logging

import typer
from rich.console import Console

from pdfglance import __version__
from pdfglance.cli.utils import handle_errors, set_context


class _RepeatFilter(logging.Filter):
    """Let each distinct message template through once per process.

    pdfminer (under pdfplumber) logs the same parser complaint for every
    page, with only the page object differing.
    """

    def __init__(self):
        super().__init__()
        self._seen: set[tuple[str, object]] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        key = (record.name, record.msg)
        if key in self._seen:
            return False
        self._seen.add(key)
        return True


for _noisy in ("pdfminer", "pdfplumber"):
    logging.getLogger(_noisy).addFilter(_RepeatFilter())

console = Console(stderr=True)

app = typer.Typer(
    name="pdfglance",
    help="""Render, search and redact PDF pages.

    [bold]Commands:[/bold]
    info     Page count and page sizes
    render   Render one page to PNG
    search   Find text and show match locations
    redact   Black out screen-space rectangles into a new PDF
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _show_version(value: bool):
    if value:
        console.print(f"pdfglance {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=_show_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Debug logging and full tracebacks on errors.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="No status lines; errors and results are still printed.",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        help="Print nothing on errors; rely on the exit code.",
    ),
):
    """Render, search and redact PDF pages."""
    set_context(verbose=verbose, quiet=2 if silent else int(quiet))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _register():
    from pdfglance.cli import info_cmd, redact_cmd, render_cmd, search_cmd

    for name, command in (
        ("info", info_cmd.info),
        ("render", render_cmd.render),
        ("search", search_cmd.search),
        ("redact", redact_cmd.redact),
    ):
        app.command(name)(handle_errors(command))


_register()


if __name__ == "__main__":
    app()
