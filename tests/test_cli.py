"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from conftest import CASH_FLOW_TABLE, COMMITMENT_SENTENCE
from dnav import __version__
from dnav.cli.main import cli


class TestScoreCommand:
    """Tests for `dnav score`."""

    def test_accepted_statement(self) -> None:
        result = CliRunner().invoke(cli, ["score", COMMITMENT_SENTENCE])
        assert result.exit_code == 0
        assert "ACCEPT" in result.output
        assert "Commitment" in result.output
        assert "q1 2025" in result.output

    def test_rejected_table_row(self) -> None:
        result = CliRunner().invoke(cli, ["score", CASH_FLOW_TABLE])
        assert result.exit_code == 0
        assert "REJECT" in result.output

    def test_tier_option(self) -> None:
        result = CliRunner().invoke(
            cli, ["score", "--tier", "C", "We are prioritizing enterprise customers in 2025."]
        )
        assert "REJECT" in result.output


class TestExtractCommand:
    """Tests for `dnav extract`."""

    def test_json_output(self, sample_memo) -> None:
        result = CliRunner().invoke(cli, ["extract", str(sample_memo), "--json"])
        assert result.exit_code == 0

        output = json.loads(result.output)
        assert output["documents"][0]["label"] == "memo.txt"
        assert output["documents"][0]["status"] == "done"
        assert len(output["candidates"]) == 1
        assert output["candidates"][0]["decision_text"] == COMMITMENT_SENTENCE
        assert output["candidates"][0]["decision_score"] >= 60

    def test_table_output(self, sample_memo) -> None:
        result = CliRunner().invoke(cli, ["extract", str(sample_memo)])
        assert result.exit_code == 0
        assert "Decision candidates" in result.output
        assert "Done: 1 candidates from 1 documents" in result.output

    def test_text_from_stdin(self) -> None:
        result = CliRunner().invoke(
            cli, ["extract", "--text", "-", "--json"], input=COMMITMENT_SENTENCE
        )
        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["documents"][0]["label"] == "Pasted text"
        assert len(output["candidates"]) == 1

    def test_export_kept(self, sample_memo, temp_dir) -> None:
        export_path = temp_dir / "kept.csv"
        result = CliRunner().invoke(
            cli,
            [
                "extract",
                str(sample_memo),
                "--keep-min-score",
                "50",
                "--export",
                str(export_path),
            ],
        )
        assert result.exit_code == 0
        lines = export_path.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 2

    def test_requires_input(self) -> None:
        result = CliRunner().invoke(cli, ["extract"])
        assert result.exit_code == 2
        assert "Provide at least one file" in result.output

    def test_unsupported_file(self, temp_dir) -> None:
        path = temp_dir / "notes.docx"
        path.write_bytes(b"")
        result = CliRunner().invoke(cli, ["extract", str(path)])
        assert result.exit_code == 2
        assert "Unsupported file type" in result.output


class TestGroup:
    """Tests for group options."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestStrictSwitch:
    """Tests for `--strict/--broad`."""

    DIRECTION_ONLY = "We are prioritizing enterprise customers in 2025."

    def test_score_broad_accepts(self) -> None:
        result = CliRunner().invoke(cli, ["score", "--broad", self.DIRECTION_ONLY])
        assert result.exit_code == 0
        assert "ACCEPT" in result.output

    def test_score_strict_rejects(self) -> None:
        result = CliRunner().invoke(cli, ["score", "--strict", self.DIRECTION_ONLY])
        assert result.exit_code == 0
        assert "REJECT" in result.output
        assert "below strict minimum" in result.output

    def test_extract_strict(self, temp_dir) -> None:
        path = temp_dir / "memo.txt"
        filler = (
            "Revenue grew eleven percent over the prior period across every region we serve. "
            "Customer retention improved in each of our three largest markets this quarter."
        )
        # one clean paragraph grades as tier A, where the broad floor is 20
        path.write_text(f"{COMMITMENT_SENTENCE} {self.DIRECTION_ONLY} {filler}\n", encoding="utf-8")

        broad = json.loads(CliRunner().invoke(cli, ["extract", str(path), "--json"]).output)
        strict = json.loads(
            CliRunner().invoke(cli, ["extract", str(path), "--strict", "--json"]).output
        )

        assert len(strict["candidates"]) == 1
        assert strict["candidates"][0]["decision_text"] == COMMITMENT_SENTENCE
        assert len(broad["candidates"]) == 2


class TestKeptSummary:
    """Tests for the kept-decision summary."""

    def test_json_summary(self, sample_memo) -> None:
        result = CliRunner().invoke(
            cli, ["extract", str(sample_memo), "--keep-min-score", "50", "--json"]
        )
        assert result.exit_code == 0

        summary = json.loads(result.output)["kept_summary"]
        assert summary["total"] == 1
        assert summary["by_type"]["Commitment"] == 1
        assert summary["by_category"]["Capex"] == 1

    def test_json_summary_without_kept(self, sample_memo) -> None:
        result = CliRunner().invoke(cli, ["extract", str(sample_memo), "--json"])
        assert json.loads(result.output)["kept_summary"]["total"] == 0

    def test_table_summary(self, sample_memo) -> None:
        result = CliRunner().invoke(cli, ["extract", str(sample_memo), "--keep-min-score", "50"])
        assert result.exit_code == 0
        assert "Kept decisions (1)" in result.output
        assert "Capex" in result.output
