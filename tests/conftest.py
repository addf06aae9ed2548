"""Pytest fixtures for pdfglance tests."""

import os
from pathlib import Path

import fitz
import pytest
from typer.testing import CliRunner

from pdfglance.config.settings import Settings, get_settings


def _write_pdf(path: Path, pages: list[tuple[float, float, list[str]]]) -> Path:
    """Write a PDF whose pages have the given size and text lines."""
    doc = fitz.open()
    try:
        for width, height, lines in pages:
            page = doc.new_page(width=width, height=height)
            for i, line in enumerate(lines):
                page.insert_text((72, 72 + i * 20), line, fontsize=12)
        doc.save(path)
    finally:
        doc.close()
    return path


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_pdf(tmp_path):
    """Factory writing a PDF from (width, height, lines) page specs."""

    def _make(pages: list[tuple[float, float, list[str]]], name: str = "doc.pdf") -> Path:
        return _write_pdf(tmp_path / name, pages)

    return _make


@pytest.fixture
def letter_pdf(make_pdf) -> Path:
    """Three US-letter pages with a little searchable text."""
    return make_pdf(
        [
            (612, 792, ["a cat sat", "on the mat"]),
            (612, 792, ["no match here"]),
            (612, 792, ["Cat and CAT"]),
        ],
        name="letter.pdf",
    )


@pytest.fixture
def mixed_pdf(make_pdf) -> Path:
    """Pages with different sizes and orientations."""
    return make_pdf(
        [
            (612, 792, ["portrait"]),
            (792, 612, ["landscape"]),
            (300, 300, ["square"]),
            (595, 842, ["a4"]),
        ],
        name="mixed.pdf",
    )


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings: small cache, narrow render width, no prefetch."""
    return Settings(
        cache={"capacity": 10},
        render={"width": 360, "max_in_flight": 2, "buffer_pages": 0},
        extraction={"backend": "pymupdf"},
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.pdfglance and PDFGLANCE_* variables."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in [n for n in os.environ if n.startswith("PDFGLANCE_")]:
        monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
