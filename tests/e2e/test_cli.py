# ABOUTME: End-to-end tests for the bookmeta CLI.
# ABOUTME: Tests inspect and mobi commands via Click's CliRunner with generated fixtures.

import json
from pathlib import Path

from click.testing import CliRunner

from bookmeta.cli import cli
from tests.fixtures.mobi_builder import build_exth, build_mobi, build_pdb, build_record0, exth_record


class TestCliInspect:
    """E2e tests for `bookmeta inspect`."""

    def test_inspect_epub(self, sample_epub: Path) -> None:
        """Inspect command displays metadata for a valid EPUB."""
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(sample_epub)])
        assert result.exit_code == 0
        assert "The Name of the Rose" in result.output
        assert "Umberto Eco" in result.output
        assert "Harcourt" in result.output
        assert "Monastery" in result.output

    def test_inspect_mobi(self, sample_mobi: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(sample_mobi)])
        assert result.exit_code == 0
        assert "MOBI" in result.output
        assert "Lewis Carroll" in result.output
        assert "Oxford" in result.output

    def test_inspect_pdf(self, sample_pdf: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(sample_pdf)])
        assert result.exit_code == 0
        assert "Example PDF" in result.output

    def test_inspect_json(self, sample_mobi: Path) -> None:
        """--json prints machine-readable metadata."""
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", "--json", str(sample_mobi)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["title"] == "Alice's Adventures in Wonderland"
        assert data["authors"] == ["Lewis Carroll", "Tim Burton"]
        assert data["isbn"] == "9780194229647"
        assert data["identifiers"]["asin"] == "B000JQU1VS"
        assert data["publish_date"] == "1865-11-26T00:00:00"
        assert data["format"] == "mobi"
        assert data["has_cover"] is True

    def test_inspect_normalize(self, tmp_path: Path) -> None:
        path = tmp_path / "mangled.mobi"
        path.write_bytes(build_pdb([build_record0(title="TheTemplarLegacy"), b"x" * 100]))
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", "--json", "--normalize", str(path)])
        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "The Templar Legacy"

    def test_inspect_title_with_brackets(self, tmp_path: Path) -> None:
        """Square brackets in a title are shown literally."""
        path = tmp_path / "notes.mobi"
        path.write_bytes(build_pdb([build_record0(title="Notes [/i] Vol 1"), b"x" * 100]))
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(path)])
        assert result.exit_code == 0
        assert "Notes [/i] Vol 1" in result.output

    def test_inspect_nonexistent_file_fails(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", "/nonexistent/path.epub"])
        assert result.exit_code != 0

    def test_inspect_corrupt_epub_reports_error(self, corrupt_epub: Path) -> None:
        """Inspect command reports a clear error for corrupt files."""
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(corrupt_epub)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_inspect_corrupt_mobi_reports_error(self, corrupt_mobi: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(corrupt_mobi)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_inspect_unsupported_reports_error(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("plain words")
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(path)])
        assert result.exit_code == 1
        assert "No metadata reader" in result.output


class TestCliMobi:
    """E2e tests for `bookmeta mobi`."""

    def test_dumps_headers(self, sample_mobi: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", str(sample_mobi)])
        assert result.exit_code == 0
        assert "BOOKMOBI" in result.output
        assert "header_length" in result.output
        assert "EXTH records" in result.output
        assert "Lewis Carroll" in result.output

    def test_unknown_exth_tag_listed(self, sample_mobi: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", str(sample_mobi)])
        assert "9999" in result.output
        assert "unknown" in result.output

    def test_author_with_brackets(self, tmp_path: Path) -> None:
        """EXTH text that looks like markup is printed as-is."""
        path = tmp_path / "smith.mobi"
        path.write_bytes(build_mobi(exth_records=[exth_record(100, "Smith [/b] Jr")]))
        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", str(path)])
        assert result.exit_code == 0
        assert "Smith [/b] Jr" in result.output

    def test_record_table(self, sample_mobi: Path) -> None:
        """--records lists every record table entry."""
        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", "--records", str(sample_mobi)])
        assert result.exit_code == 0
        assert "Record table" in result.output
        assert "Unique ID" in result.output

    def test_malformed_exth_warns(self, tmp_path: Path) -> None:
        """A broken EXTH block is reported but the headers still print."""
        exth = build_exth([exth_record(100, "Jane Doe")], lengths={0: 5})
        path = tmp_path / "broken_exth.mobi"
        path.write_bytes(build_pdb([build_record0(title="Broken", exth=exth), b"x" * 100]))

        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", str(path)])
        assert result.exit_code == 0
        assert "Warning" in result.output
        assert "EXTH records" not in result.output

    def test_not_mobi_reports_error(self, corrupt_mobi: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["mobi", str(corrupt_mobi)])
        assert result.exit_code == 1
        assert "Error" in result.output
