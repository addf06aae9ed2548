"""Tests for text extraction."""

import pytest

from pdfglance.core.text import TextExtractor
from pdfglance.document import DocumentHandle
from pdfglance.exceptions import ConfigError, ExtractionError
from pdfglance.extractors import (
    PdfPlumberExtractor,
    PyMuPDFExtractor,
    get_extractor,
    text_or_empty,
)


class TestTextOrEmpty:
    """Tests for per-page failure isolation."""

    def test_returns_text(self):
        assert text_or_empty(0, lambda: "hello") == "hello"

    def test_none_becomes_empty(self):
        assert text_or_empty(0, lambda: None) == ""

    def test_failure_becomes_empty(self, caplog):
        """A failing page should log a warning and yield empty text."""

        def boom():
            raise RuntimeError("no text layer")

        assert text_or_empty(4, boom) == ""
        assert "page 4" in caplog.text


class TestTextExtractor:
    """Tests for TextExtractor.extract_all."""

    def test_one_entry_per_page_with_failed_page_empty(self, letter_pdf):
        """Pages the backend skips should come back as empty strings."""

        class MockBackend:
            name = "mock"

            def extract_text_by_page(self, handle):
                return [(0, "first"), (2, "third")]

        with DocumentHandle(letter_pdf) as handle:
            texts = TextExtractor(MockBackend()).extract_all(handle)

        assert texts == ["first", "", "third"]

    def test_document_level_failure_is_not_fatal(self, letter_pdf):
        class BrokenBackend:
            name = "broken"

            def extract_text_by_page(self, handle):
                raise ExtractionError("Failed to extract text", details="encrypted")

        with DocumentHandle(letter_pdf) as handle:
            texts = TextExtractor(BrokenBackend()).extract_all(handle)

        assert texts == ["", "", ""]

    def test_result_is_memoized(self, letter_pdf):
        calls = []

        class CountingBackend:
            name = "counting"

            def extract_text_by_page(self, handle):
                calls.append(handle.path)
                return [(i, f"page {i}") for i in range(handle.page_count)]

        extractor = TextExtractor(CountingBackend())
        with DocumentHandle(letter_pdf) as handle:
            first = extractor.extract_all(handle)
            second = extractor.extract_all(handle)
            extractor.forget(handle)
            extractor.extract_all(handle)

        assert first is second
        assert len(calls) == 2

    @pytest.mark.parametrize("backend", [PdfPlumberExtractor(), PyMuPDFExtractor()])
    def test_real_backends_find_inserted_text(self, letter_pdf, backend):
        with DocumentHandle(letter_pdf) as handle:
            texts = TextExtractor(backend).extract_all(handle)

        assert len(texts) == 3
        assert "a cat sat" in texts[0]
        assert "no match here" in texts[1]
        assert "CAT" in texts[2]

    def test_blank_page_is_empty(self, make_pdf):
        path = make_pdf([(612, 792, ["text"]), (612, 792, [])])

        with DocumentHandle(path) as handle:
            texts = TextExtractor().extract_all(handle)

        assert texts[1].strip() == ""

    def test_extraction_is_deterministic(self, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            a = TextExtractor().extract_all(handle)
            b = TextExtractor().extract_all(handle)

        assert a == b


class TestGetExtractor:
    """Tests for backend lookup."""

    def test_known_backends(self):
        assert isinstance(get_extractor("pdfplumber"), PdfPlumberExtractor)
        assert isinstance(get_extractor("pymupdf"), PyMuPDFExtractor)

    def test_unknown_backend(self):
        with pytest.raises(ConfigError) as exc_info:
            get_extractor("tesseract")

        assert "pdfplumber" in exc_info.value.hint
