"""Unit tests for CLI commands using typer.testing.CliRunner."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from patchcov.cli import app
from patchcov.config import Settings
from patchcov.diff.parser import parse_file_diff
from patchcov.exceptions import GitCommandError
from patchcov.revisions import RevisionContext

runner = CliRunner()

FIXTURES = Path(__file__).parent.parent / "coverage" / "tests" / "fixtures"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for field in Settings.model_fields:
        monkeypatch.delenv(f"PATCHCOV_{field.upper()}", raising=False)


@pytest.fixture(autouse=True)
def reset_patchcov_logger():
    logger = logging.getLogger("patchcov")
    handlers = list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _context() -> RevisionContext:
    return RevisionContext(
        base_branch="main",
        head_branch="feature/loader",
        head_tip_commit="5d1f0e3",
        last_merge_commit="9a8b7c6",
        merge_base_commit="c0ffee1",
        pr_files=("app/main.py", "app/util.py"),
    )


def _diffs():
    def load(name: str, fixture: str):
        return parse_file_diff(name, (FIXTURES / fixture).read_text(encoding="utf-8"))

    pr_diffs = {
        "app/main.py": load("app/main.py", "pr_main.diff"),
        "app/util.py": load("app/util.py", "pr_util.diff"),
    }
    reconciliation_diffs = {
        "app/main.py": load("app/main.py", "reconcile_main.diff"),
        "app/util.py": load("app/util.py", "reconcile_util.diff"),
    }
    return pr_diffs, reconciliation_diffs


class TestPrPatchCoverageCommand:
    """Tests for the pr-patch-coverage command."""

    def test_command_exists(self):
        result = runner.invoke(app, ["pr-patch-coverage", "--help"])
        assert result.exit_code == 0
        assert "Generates patch coverage for PR" in result.output

    def test_requires_report_argument(self):
        result = runner.invoke(app, ["pr-patch-coverage"])
        assert result.exit_code != 0
        assert "Missing argument" in result.output

    def test_missing_base_branch_fails(self, tmp_path: Path):
        result = runner.invoke(
            app,
            [
                "pr-patch-coverage",
                str(FIXTURES / "coverage_cc.json"),
                "--repo",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "base-branch is required" in result.output

    @patch("patchcov.cli.read_line_counts")
    @patch("patchcov.cli.collect_file_diffs")
    @patch("patchcov.cli.resolve_revision_context")
    def test_writes_patch_report(
        self, mock_resolve, mock_collect, mock_counts, tmp_path: Path
    ):
        mock_resolve.return_value = _context()
        mock_collect.return_value = _diffs()
        mock_counts.return_value = {"app/main.py": 6, "app/util.py": 3}
        output = tmp_path / "patch.json"

        result = runner.invoke(
            app,
            [
                "pr-patch-coverage",
                str(FIXTURES / "coverage_cc.json"),
                "--base-branch",
                "main",
                "--repo",
                str(tmp_path),
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Files: 1" in result.output
        assert "Dropped: app/util.py" in result.output

        data = json.loads(output.read_text(encoding="utf-8"))
        assert [f["name"] for f in data["source_files"]] == ["app/main.py"]
        assert json.loads(data["source_files"][0]["coverage"]) == [None, None, 5, 0, None, None]

        settings = mock_resolve.call_args.args[0]
        assert settings.base_branch == "main"
        assert settings.repo_dir == tmp_path
        assert mock_counts.call_args.args[1] == ["app/main.py", "app/util.py"]

    @patch("patchcov.cli.collect_file_diffs")
    @patch("patchcov.cli.resolve_revision_context")
    def test_git_failure_exits_nonzero(self, mock_resolve, mock_collect, tmp_path: Path):
        mock_resolve.return_value = _context()
        mock_collect.side_effect = GitCommandError("git_diff", 128, "fatal: bad object")

        result = runner.invoke(
            app,
            [
                "pr-patch-coverage",
                str(FIXTURES / "coverage_cc.json"),
                "--base-branch",
                "main",
                "--repo",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "Error" in result.output
        assert "bad object" in result.output

    @patch("patchcov.cli.collect_file_diffs")
    @patch("patchcov.cli.resolve_revision_context")
    def test_missing_report_exits_nonzero(self, mock_resolve, mock_collect, tmp_path: Path):
        mock_resolve.return_value = _context()
        mock_collect.return_value = _diffs()

        result = runner.invoke(
            app,
            [
                "pr-patch-coverage",
                str(tmp_path / "missing.json"),
                "--base-branch",
                "main",
                "--repo",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_log_level(self, tmp_path: Path):
        result = runner.invoke(
            app,
            [
                "pr-patch-coverage",
                str(FIXTURES / "coverage_cc.json"),
                "--base-branch",
                "main",
                "--repo",
                str(tmp_path),
                "--log-level",
                "chatty",
            ],
        )

        assert result.exit_code != 0


class TestHunksCommand:
    """Tests for the hunks command."""

    def test_prints_normalized_headers(self):
        result = runner.invoke(
            app, ["hunks", str(FIXTURES / "pr_main.diff"), "--file", "app/main.py"]
        )

        assert result.exit_code == 0
        assert "fileName: app/main.py" in result.output
        assert "@@ -2,0 +3,2 @@" in result.output
        assert "Added lines: 2" in result.output

    def test_reads_stdin(self):
        result = runner.invoke(app, ["hunks", "-"], input="@@ -1,1 +1,1 @@\n-a\n+b\n")

        assert result.exit_code == 0
        assert "@@ -1 +1 @@" in result.output

    def test_malformed_diff(self, tmp_path: Path):
        diff = tmp_path / "bad.diff"
        diff.write_text("@@ -1 1 @@\n", encoding="utf-8")

        result = runner.invoke(app, ["hunks", str(diff)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["hunks", str(tmp_path / "nope.diff")])

        assert result.exit_code != 0


class TestMainCallback:
    """Tests for the main CLI callback."""

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "pr-patch-coverage" in result.output
        assert "hunks" in result.output
