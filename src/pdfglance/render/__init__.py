"""Page rendering."""

from pdfglance.render.renderer import PageRenderer

__all__ = ["PageRenderer"]
