"""Tests for the bebopc entry point."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bebopc import __version__
from bebopc.flags import render_help_text
from bebopc.main import app

runner = CliRunner()


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("enum Color { Red = 1; }\n", encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An isolated working directory with one schema file."""
    _touch(tmp_path / "a.bop")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# help / version
# ---------------------------------------------------------------------------


class TestHelpAndVersion:
    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert result.output == render_help_text()

    def test_help_with_other_flags(self) -> None:
        result = runner.invoke(app, ["--cs", "--help", "--log-format", "xml"])
        assert result.exit_code == 0
        assert "Options:" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"bebopc {__version__}"


# ---------------------------------------------------------------------------
# parse errors
# ---------------------------------------------------------------------------


class TestParseErrors:
    def test_no_flags(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "No commandline flags found." in result.output
        assert "Usage:" in result.output

    def test_missing_value(self) -> None:
        result = runner.invoke(app, ["--cs"])
        assert result.exit_code == 1
        assert "'cs'" in result.output

    def test_invalid_enum(self) -> None:
        result = runner.invoke(app, ["--log-format", "xml", "--files", "a.bop"])
        assert result.exit_code == 1
        assert "xml" in result.output

    def test_duplicate(self) -> None:
        result = runner.invoke(app, ["--ts", "a.ts", "--ts", "b.ts"])
        assert result.exit_code == 1
        assert "more than once" in result.output

    def test_msbuild_error_format(self) -> None:
        result = runner.invoke(app, ["--log-format", "msbuild", "--cs"])
        assert result.exit_code == 1
        assert result.output.startswith(
            "bebopc: error: Commandline flag 'cs' was not assigned a value.\n"
        )
        assert "Usage:" in result.output

    def test_structured_error_format(self) -> None:
        result = runner.invoke(app, ["--log-format", "structured", "--cs"])
        assert result.exit_code == 1
        first_line = result.output.splitlines()[0]
        data = json.loads(first_line)
        assert data["severity"] == "error"
        assert data["message"] == "Commandline flag 'cs' was not assigned a value."
        assert "Options:" in result.output

    def test_invalid_log_format_reported_as_structured(self) -> None:
        result = runner.invoke(app, ["--log-format", "xml", "--files", "a.bop"])
        assert result.exit_code == 1
        data = json.loads(result.output.splitlines()[0])
        assert "xml" in data["message"]


# ---------------------------------------------------------------------------
# invocation
# ---------------------------------------------------------------------------


class TestInvocation:
    def test_plan(self, project: Path) -> None:
        result = runner.invoke(app, ["--files", "a.bop", "--cs", "gen/A.cs", "--namespace", "Acme"])
        assert result.exit_code == 0, result.output
        assert "bebopc plan" in result.output
        assert "a.bop" in result.output
        assert "Acme" in result.output

    def test_check(self, project: Path) -> None:
        result = runner.invoke(app, ["--check", "a.bop"])
        assert result.exit_code == 0, result.output
        assert "bebopc check" in result.output

    def test_missing_schema(self, project: Path) -> None:
        result = runner.invoke(app, ["--files", "ghost.bop"])
        assert result.exit_code == 1
        assert "ghost.bop" in result.output

    def test_discovers_config(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (project / "bebop.json").write_text(
            json.dumps({
                "inputFiles": ["a.bop"],
                "generators": [{"alias": "dart", "outFile": "gen/a.dart"}],
            }),
            encoding="utf-8",
        )
        sub = project / "sub"
        sub.mkdir()
        monkeypatch.chdir(sub)
        result = runner.invoke(app, ["--log-format", "msbuild"])
        assert result.exit_code == 0, result.output
        assert "dart" in result.output
        assert "bebop.json" in result.output

    def test_explicit_config(self, project: Path) -> None:
        cfg_dir = project / "conf"
        cfg_dir.mkdir()
        (cfg_dir / "bebop.json").write_text(
            json.dumps({"inputFiles": ["../a.bop"], "generators": [{"alias": "ts", "outFile": "x.ts"}]}),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["--config", "conf/bebop.json"])
        assert result.exit_code == 0, result.output
        assert "ts" in result.output

    def test_explicit_config_missing(self, project: Path) -> None:
        result = runner.invoke(app, ["--config", "nope.json"])
        assert result.exit_code == 1
        assert "Config not found" in result.output

    def test_invalid_config(self, project: Path) -> None:
        (project / "bebop.json").write_text("{", encoding="utf-8")
        result = runner.invoke(app, ["--files", "a.bop"])
        assert result.exit_code == 1
        assert "invalid JSON" in result.output

    def test_unknown_flag_warning_structured(self, project: Path) -> None:
        result = runner.invoke(app, ["--files", "a.bop", "--java", "A.java"])
        assert result.exit_code == 0, result.output
        assert '"severity": "warning"' in result.output
        assert "--java" in result.output
