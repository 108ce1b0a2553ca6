"""Tests for the gapminer CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from gapminer.cli import cli
from gapminer.settings import SETTINGS_ENV_VAR

VALID_GAPS = json.dumps(
    [
        {
            "problem": "Scaling laws are not validated beyond ten billion parameters",
            "type": "evaluation",
            "confidence": 0.8,
        }
    ]
)


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> CliRunner:
    """CliRunner running from an empty directory with no settings override."""
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _write(path: Path, content: str) -> str:
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestValidateCommands:
    """gapminer validate ..."""

    def test_valid_gaps_exit_zero(self, runner: CliRunner, tmp_path: Path) -> None:
        response = _write(tmp_path / "gaps.json", VALID_GAPS)
        result = runner.invoke(cli, ["validate", "gaps", response])

        assert result.exit_code == 0
        assert "gap_extraction: VALID (score 1.00)" in result.output
        assert "No issues found." in result.output

    def test_invalid_gaps_exit_one(self, runner: CliRunner, tmp_path: Path) -> None:
        response = _write(tmp_path / "gaps.json", "[this is {not} json]")
        result = runner.invoke(cli, ["validate", "gaps", response])

        assert result.exit_code == 1
        assert "INVALID" in result.output
        assert "[CRITICAL] format_error" in result.output

    def test_gaps_json_output(self, runner: CliRunner, tmp_path: Path) -> None:
        response = _write(tmp_path / "gaps.json", VALID_GAPS)
        result = runner.invoke(cli, ["validate", "gaps", response, "--max-gaps", "1", "--json"])

        data = json.loads(result.stdout)
        assert data["is_valid"] is True
        assert data["score"] == 1.0

    def test_gaps_with_paper(self, runner: CliRunner, tmp_path: Path) -> None:
        response = _write(tmp_path / "gaps.json", VALID_GAPS)
        paper = _write(tmp_path / "paper.txt", "A study of robot grasping in cluttered homes.")
        result = runner.invoke(cli, ["validate", "gaps", response, "--paper", paper])

        assert result.exit_code == 1
        assert "hallucination" in result.output

    def test_proposal(self, runner: CliRunner, tmp_path: Path) -> None:
        response = _write(tmp_path / "proposal.json", "[1, 2]")
        result = runner.invoke(cli, ["validate", "proposal", response])
        assert result.exit_code == 1
        assert "Response is not an object" in result.output

    def test_redteam(self, runner: CliRunner, tmp_path: Path) -> None:
        items = [
            {
                "failure_mode": "Benchmark contamination inflates scores",
                "mitigation": "Deduplicate training data against every benchmark split",
            }
        ]
        response = _write(tmp_path / "redteam.json", json.dumps(items))
        result = runner.invoke(cli, ["validate", "redteam", response])

        assert result.exit_code == 0
        assert "Less than 3 failure modes" in result.output

    def test_toxicity(self, runner: CliRunner, tmp_path: Path) -> None:
        text = _write(tmp_path / "text.txt", "Reports of harassment were removed.")
        result = runner.invoke(cli, ["validate", "toxicity", text, "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "detected": True,
            "severity": "medium",
            "categories": ["harassment"],
        }

    def test_config_changes_threshold(self, runner: CliRunner, tmp_path: Path) -> None:
        config = _write(tmp_path / "strict.toml", "[validation]\nvalidity_threshold = 0.9\n")
        response = _write(tmp_path / "gaps.json", "[]")

        default = runner.invoke(cli, ["validate", "gaps", response])
        strict = runner.invoke(cli, ["--config", config, "validate", "gaps", response])

        assert default.exit_code == 0
        assert strict.exit_code == 1


class TestCircuitsCommands:
    """gapminer circuits ..."""

    def test_defaults_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["circuits", "defaults", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["gemini-api"]["failure_threshold"] == 3
        assert data["firestore"]["timeout_seconds"] == 10.0

    def test_defaults_text(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["circuits", "defaults"])
        assert result.exit_code == 0
        assert "gemini-api: failures=3" in result.output

    def test_defaults_honor_config(self, runner: CliRunner, tmp_path: Path) -> None:
        config = _write(tmp_path / "gapminer.toml", "[circuits.pdf-parser]\nfailure_threshold = 2\n")
        result = runner.invoke(cli, ["--config", config, "circuits", "defaults", "--json"])
        assert json.loads(result.stdout)["pdf-parser"]["failure_threshold"] == 2

    def test_simulate_outage_and_recovery(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli,
            ["circuits", "simulate", "gemini-api", "--successes", "2", "--json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        states = [step["state"] for step in data["steps"]]
        assert states == ["closed", "closed", "open", "half-open", "closed"]
        assert data["metrics"]["state"] == "closed"
        assert data["metrics"]["total_requests"] == 5

    def test_bad_config_exits_with_error(self, runner: CliRunner, tmp_path: Path) -> None:
        config = _write(tmp_path / "bad.toml", "[validation]\nstrictness = 1\n")
        result = runner.invoke(cli, ["--config", config, "circuits", "defaults"])
        assert result.exit_code == 1
        assert "strictness" in result.output


class TestServeCommand:
    def test_serve_delegates_to_run_server(self, runner: CliRunner) -> None:
        with patch("gapminer.api.serve.run_server") as mock_run:
            result = runner.invoke(cli, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(
            host="127.0.0.1",
            port=9000,
            reload=False,
            log_level="info",
            config_path=None,
        )
