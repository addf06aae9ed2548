"""Caching layer for rendered pages."""

from pdfglance.cache.page_cache import DEFAULT_CAPACITY, PageCache

__all__ = ["DEFAULT_CAPACITY", "PageCache"]
