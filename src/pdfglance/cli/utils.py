"""Helpers shared by the CLI commands: output flags, error reporting, parsing."""

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import typer
from rich.console import Console

from pdfglance.exceptions import PdfGlanceError

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class OutputFlags:
    """Global output flags set by the app callback.

    ``quiet`` is 0 (normal), 1 (``--quiet``: no status lines) or
    2 (``--silent``: nothing at all, exit code only).
    """

    verbose: bool = False
    quiet: int = 0


_flags = OutputFlags()


def set_context(verbose: bool = False, quiet: int = 0) -> None:
    _flags.verbose = verbose
    _flags.quiet = quiet


def is_verbose() -> bool:
    return _flags.verbose


def is_quiet() -> bool:
    """True for ``--quiet`` and ``--silent``."""
    return _flags.quiet >= 1


def is_silent() -> bool:
    return _flags.quiet >= 2


def get_console() -> Console:
    """Status console on stderr; muted under ``--quiet``."""
    return Console(stderr=True, quiet=is_quiet())


def _report(console: Console, error: PdfGlanceError) -> None:
    console.print(f"[red]Error:[/red] {error.message}")
    if error.details:
        console.print(f"[dim]{error.details}[/dim]")
    if error.hint:
        console.print(f"[dim]Hint: {error.hint}[/dim]")


def handle_errors(func: F) -> F:
    """Turn exceptions raised by a command into a message and an exit code.

    pdfglance errors exit with their own ``exit_code`` (see
    :mod:`pdfglance.exceptions`); anything unexpected exits with 1.
    ``--verbose`` prints the traceback instead of the short message.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        console = Console(stderr=True, quiet=is_silent())
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.BadParameter):
            raise
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted[/yellow]")
            raise typer.Exit(130)
        except Exception as e:
            if is_verbose():
                console.print_exception()
            elif isinstance(e, PdfGlanceError):
                _report(console, e)
            elif isinstance(e, PermissionError):
                console.print(f"[red]Permission denied:[/red] {e.filename or e}")
            else:
                console.print(f"[red]Unexpected error:[/red] {type(e).__name__}: {e}")
            raise typer.Exit(e.exit_code if isinstance(e, PdfGlanceError) else 1)

    return wrapper  # type: ignore[return-value]


def parse_rect(value: str) -> tuple[int, float, float, float, float]:
    """Parse ``"page,x0,y0,x1,y1"`` into a page index and screen corners.

    Raises:
        typer.BadParameter: If the value is malformed.
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 5:
        raise typer.BadParameter(f"Expected page,x0,y0,x1,y1 but got {value!r}")
    try:
        page = int(parts[0])
        x0, y0, x1, y1 = (float(p) for p in parts[1:])
    except ValueError:
        raise typer.BadParameter(f"Non-numeric rectangle: {value!r}") from None
    return page, x0, y0, x1, y1
