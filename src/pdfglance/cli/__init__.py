"""Command-line interface for pdfglance."""

from pdfglance.cli.app import app

__all__ = ["app"]
