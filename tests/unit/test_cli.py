"""Tests for the pdfglance command line."""

import json

import fitz
import pytest
import typer

from pdfglance import __version__
from pdfglance.cli.app import app
from pdfglance.cli.utils import parse_rect


class TestVersion:
    def test_version_flag(self, cli_runner):
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestInfo:
    """Tests for the info command."""

    def test_json_lists_page_sizes(self, cli_runner, mixed_pdf):
        result = cli_runner.invoke(app, ["info", str(mixed_pdf), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["pages"] == 4
        assert data["sizes"][1] == {"page": 1, "width": 792, "height": 612}

    def test_table_output(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["info", str(letter_pdf)])

        assert result.exit_code == 0
        assert "3 pages" in result.output

    def test_missing_file_exit_code(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["info", str(tmp_path / "missing.pdf")])

        assert result.exit_code == 40
        assert "Error" in result.output


class TestRender:
    """Tests for the render command."""

    def test_writes_png(self, cli_runner, letter_pdf, tmp_path):
        output = tmp_path / "page.png"
        result = cli_runner.invoke(app, ["render", str(letter_pdf), "1", "-w", "200", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_bytes().startswith(b"\x89PNG")
        pix = fitz.Pixmap(str(output))
        assert (pix.width, pix.height) == (200, round(792 * 200 / 612))

    def test_default_output_name(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["render", str(letter_pdf), "0", "-w", "50"])

        assert result.exit_code == 0
        assert (letter_pdf.parent / "letter_p0.png").exists()

    def test_out_of_range_exit_code(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["render", str(letter_pdf), "3", "-w", "50"])

        assert result.exit_code == 10


class TestSearch:
    """Tests for the search command."""

    def test_json_matches(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["search", str(letter_pdf), "cat", "--json", "--rects", "-w", "360"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["count"] == 3
        assert [m["page"] for m in data["matches"]] == [0, 2, 2]
        assert [m["text"] for m in data["matches"]] == ["cat", "Cat", "CAT"]
        assert all(len(m["rect"]) == 4 for m in data["matches"])

    def test_no_matches(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["search", str(letter_pdf), "zebra"])

        assert result.exit_code == 0
        assert "No matches" in result.output


class TestRedact:
    """Tests for the redact command."""

    def test_writes_redacted_copy(self, cli_runner, letter_pdf, tmp_path):
        output = tmp_path / "clean.pdf"
        original = letter_pdf.read_bytes()
        result = cli_runner.invoke(
            app,
            ["redact", str(letter_pdf), "-w", "360", "-r", "0,0,23,360,35", "-o", str(output)],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["output"] == str(output)
        assert letter_pdf.read_bytes() == original
        with fitz.open(output) as doc:
            assert "a cat sat" not in doc[0].get_text()

    def test_malformed_rect(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(app, ["redact", str(letter_pdf), "-r", "0,1,2"])

        assert result.exit_code != 0
        assert not (letter_pdf.parent / "letter_redacted.pdf").exists()

    def test_refuses_to_overwrite_source(self, cli_runner, letter_pdf):
        result = cli_runner.invoke(
            app,
            ["redact", str(letter_pdf), "-r", "0,0,0,10,10", "-o", str(letter_pdf)],
        )

        assert result.exit_code == 50


class TestOutputFlags:
    """Tests for --quiet and --silent."""

    def test_quiet_hides_status_line(self, cli_runner, letter_pdf, tmp_path):
        output = tmp_path / "page.png"
        result = cli_runner.invoke(app, ["-q", "render", str(letter_pdf), "0", "-w", "50", "-o", str(output)])

        assert result.exit_code == 0
        assert output.exists()
        assert "Rendered" not in result.output

    def test_silent_hides_errors_but_keeps_exit_code(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["--silent", "info", str(tmp_path / "missing.pdf")])

        assert result.exit_code == 40
        assert "Error" not in result.output


class TestParseRect:
    def test_valid(self):
        assert parse_rect("2, 10, 20.5, 30, 40") == (2, 10.0, 20.5, 30.0, 40.0)

    def test_wrong_arity(self):
        with pytest.raises(typer.BadParameter):
            parse_rect("1,2,3")

    def test_non_numeric(self):
        with pytest.raises(typer.BadParameter):
            parse_rect("0,a,b,c,d")
