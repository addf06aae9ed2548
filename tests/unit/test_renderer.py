"""Tests for document handles and page rendering."""

from unittest.mock import patch

import pytest

from pdfglance.document import DocumentHandle
from pdfglance.exceptions import OutOfRangeError, RenderError, ResourceError
from pdfglance.models import PageSize
from pdfglance.render import PageRenderer


class TestDocumentHandle:
    """Tests for opening and closing documents."""

    def test_page_count_and_sizes(self, mixed_pdf):
        with DocumentHandle(mixed_pdf) as handle:
            assert handle.page_count == 4
            size = handle.page_size(1)
            assert (size.width, size.height) == (792, 612)

    def test_close_is_idempotent(self, letter_pdf):
        handle = DocumentHandle(letter_pdf)
        handle.close()
        handle.close()

        assert handle.closed
        with pytest.raises(ResourceError):
            _ = handle.doc

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceError) as exc_info:
            DocumentHandle(tmp_path / "missing.pdf")

        assert exc_info.value.hint

    def test_corrupt_file(self, tmp_path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"this is not a pdf at all")

        with pytest.raises(ResourceError):
            DocumentHandle(bad)

    def test_out_of_range_page(self, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            with pytest.raises(OutOfRangeError):
                handle.page_size(3)
            with pytest.raises(OutOfRangeError):
                handle.page_size(-1)


class TestPageRenderer:
    """Tests for PageRenderer.render."""

    @pytest.fixture
    def renderer(self):
        return PageRenderer()

    @pytest.mark.parametrize("width", [1, 97, 360, 1080])
    def test_aspect_ratio_preserved(self, renderer, mixed_pdf, width):
        """Every page's bitmap should keep its native aspect ratio."""
        with DocumentHandle(mixed_pdf) as handle:
            for i in range(handle.page_count):
                size = handle.page_size(i)
                page = renderer.render(handle, i, width)

                assert page.width == width
                assert page.height == max(1, round(size.height * width / size.width))
                assert page.height / page.width == pytest.approx(size.aspect_ratio, abs=1 / width)

    def test_very_wide_page_keeps_one_row(self, renderer, make_pdf):
        assert PageSize(14400, 3).scaled_height(360) == 1

        with DocumentHandle(make_pdf([(14400, 3, [])], name="strip.pdf")) as handle:
            page = renderer.render(handle, 0, 360)

        assert (page.width, page.height) == (360, 1)

    def test_buffer_is_rgba(self, renderer, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            page = renderer.render(handle, 0, 120)

        assert page.channels == 4
        assert page.stride == page.width * 4
        assert page.nbytes == page.stride * page.height

    def test_rgb_without_alpha(self, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            page = PageRenderer(alpha=False).render(handle, 0, 120)

        assert page.channels == 3
        assert page.nbytes == page.width * page.height * 3

    def test_png_output(self, renderer, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            page = renderer.render(handle, 0, 100)

        assert page.to_png().startswith(b"\x89PNG")
        page.release()
        with pytest.raises(ValueError):
            page.to_png()

    def test_handle_stays_open(self, renderer, letter_pdf):
        with DocumentHandle(letter_pdf) as handle:
            renderer.render(handle, 0, 100)
            assert not handle.closed

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_out_of_range(self, renderer, letter_pdf, index):
        with DocumentHandle(letter_pdf) as handle:
            with pytest.raises(OutOfRangeError):
                renderer.render(handle, index, 100)

    @pytest.mark.parametrize("width", [0, -5, 1.5, True])
    def test_invalid_width(self, renderer, letter_pdf, width):
        with DocumentHandle(letter_pdf) as handle:
            with pytest.raises(ValueError):
                renderer.render(handle, 0, width)

    def test_closed_handle(self, renderer, letter_pdf):
        handle = DocumentHandle(letter_pdf)
        handle.close()

        with pytest.raises(ResourceError):
            renderer.render(handle, 0, 100)

    def test_rasterization_failure_is_render_error(self, renderer, letter_pdf):
        """Backend failures should surface as RenderError with the page index."""
        with DocumentHandle(letter_pdf) as handle:
            with patch("fitz.Page.get_pixmap", side_effect=RuntimeError("broken stream")):
                with pytest.raises(RenderError) as exc_info:
                    renderer.render(handle, 2, 100)

        assert exc_info.value.page_index == 2
        assert "broken stream" in exc_info.value.details
