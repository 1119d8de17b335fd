"""Tests for the pipegraph command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from pipegraph import __version__
from pipegraph.cli.main import cli

FIXTURES = Path(__file__).parent.parent / "fixtures"


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args))


class TestRunCommand:
    def test_runs_fixture_to_completion(self, tmp_path: Path):
        logs = tmp_path / "run"
        result = _invoke("run", str(FIXTURES / "branching.dot"), "--logs-dir", str(logs))
        assert result.exit_code == 0, result.output
        assert "Status: completed" in result.output
        assert "- b [success]" in result.output
        assert "- a [" not in result.output
        assert (logs / "manifest.json").exists()

    def test_goal_override(self, tmp_path: Path):
        logs = tmp_path / "run"
        result = _invoke(
            "run", str(FIXTURES / "simple_pipeline.dot"), "--logs-dir", str(logs), "--goal", "Ship v2"
        )
        assert result.exit_code == 0, result.output
        assert "Goal: Ship v2" in result.output
        prompt = (logs / "run_tests" / "prompt.md").read_text()
        assert prompt == "Run the test suite for: Ship v2"
        assert json.loads((logs / "manifest.json").read_text())["goal"] == "Ship v2"

    def test_auto_approve_picks_first_choice(self, tmp_path: Path):
        result = _invoke("run", str(FIXTURES / "human_gate.dot"), "--logs-dir", str(tmp_path))
        assert result.exit_code == 0, result.output
        assert "- ship [success]" in result.output

    def test_interactive_skip_uses_default_choice(self, tmp_path: Path):
        result = CliRunner().invoke(
            cli,
            ["run", str(FIXTURES / "human_gate.dot"), "--logs-dir", str(tmp_path), "--interactive"],
            input="\n",
        )
        assert result.exit_code == 0, result.output
        assert "Approve the change?" in result.output
        assert "- rework [success]" in result.output

    def test_parse_error_exits_1(self, tmp_path: Path):
        bad = tmp_path / "bad.dot"
        bad.write_text("digraph {")
        result = _invoke("run", str(bad), "--logs-dir", str(tmp_path / "run"))
        assert result.exit_code == 1
        assert "Parse error" in result.output

    def test_fatal_pipeline_error_exits_1(self, tmp_path: Path):
        dot = tmp_path / "nostart.dot"
        dot.write_text("digraph NoStart { work }")
        result = _invoke("run", str(dot), "--logs-dir", str(tmp_path / "run"))
        assert result.exit_code == 1
        assert "Pipeline failed" in result.output


class TestResumeCommand:
    def test_resume_after_run(self, tmp_path: Path):
        logs = tmp_path / "run"
        dot = str(FIXTURES / "simple_pipeline.dot")
        assert _invoke("run", dot, "--logs-dir", str(logs)).exit_code == 0

        result = _invoke("resume", dot, str(logs))
        assert result.exit_code == 0, result.output
        assert "Status: completed (resumed)" in result.output

    def test_resume_without_checkpoint_exits_1(self, tmp_path: Path):
        result = _invoke("resume", str(FIXTURES / "simple_pipeline.dot"), str(tmp_path))
        assert result.exit_code == 1
        assert "No checkpoint found" in result.output


class TestInspectCommand:
    def test_shows_structure(self):
        result = _invoke("inspect", str(FIXTURES / "branching.dot"))
        assert result.exit_code == 0, result.output
        assert "Graph: Branching" in result.output
        assert "Start: start" in result.output
        assert "Exit:  exit" in result.output
        assert "gate  shape=diamond  handler=conditional" in result.output
        assert "gate -> b  weight=10" in result.output


class TestVersion:
    def test_version(self):
        result = _invoke("--version")
        assert __version__ in result.output
