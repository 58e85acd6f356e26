import logging
import sys
from pathlib import Path

import typer

from patchcov.config import DEFAULT_OUTPUT_PATH, load_settings
from patchcov.coverage.io import load_report, save_report
from patchcov.coverage.patch import build_patch_report
from patchcov.diff.parser import parse_file_diff
from patchcov.exceptions import PatchCoverageError
from patchcov.logging import setup_logging
from patchcov.revisions import (
    collect_file_diffs,
    read_line_counts,
    resolve_revision_context,
)

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True)


@app.command("pr-patch-coverage")
def pr_patch_coverage_cmd(
    report: Path = typer.Argument(..., help="Formatted coverage report (JSON)"),
    base_branch: str | None = typer.Option(
        None, "--base-branch", help="the base branch of the PR"
    ),
    head_branch: str | None = typer.Option(
        None, "--head-branch", help="the head branch of the PR"
    ),
    head_tip_commit: str | None = typer.Option(
        None, "--head-tip-commit", help="commit on tip of PR head branch"
    ),
    last_merge_commit: str | None = typer.Option(
        None, "--last-merge-commit", help="last merge commit on the head branch"
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        help=f"output path, '-' for stdout [default: {DEFAULT_OUTPUT_PATH}]",
    ),
    repo_dir: Path | None = typer.Option(
        None, "--repo", help="git working tree to read revisions from"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="YAML file with default options"
    ),
    timeout_sec: int | None = typer.Option(
        None, "--timeout", help="timeout in seconds for each git call"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="log level"),
):
    """Generates patch coverage for PR. Needs to be run after format-coverage."""
    try:
        settings = load_settings(
            config_path=config,
            overrides={
                "base_branch": base_branch,
                "head_branch": head_branch,
                "head_tip_commit": head_tip_commit,
                "last_merge_commit": last_merge_commit,
                "output": output,
                "repo_dir": repo_dir,
                "timeout_sec": timeout_sec,
                "log_level": log_level,
            },
        )
    except PatchCoverageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        setup_logging(settings.log_level)
    except ValueError:
        raise typer.BadParameter(
            f"unknown log level {settings.log_level!r}", param_hint="--log-level"
        )

    try:
        context = resolve_revision_context(settings)
        pr_diffs, reconciliation_diffs = collect_file_diffs(context)
        full_report = load_report(report)

        touched = sorted(name for name in full_report.source_files if name in pr_diffs)
        line_counts = read_line_counts(context, touched)

        result = build_patch_report(
            full_report, pr_diffs, reconciliation_diffs, line_counts, log=logger
        )
        written = save_report(result.report, settings.output)
    except PatchCoverageError as e:
        logger.error("pr-patch-coverage failed: %s", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Patch report: {written or 'stdout'}", err=written is None)
    typer.echo(f"Files: {len(result.report.source_files)}", err=written is None)
    for dropped in result.dropped:
        typer.echo(f"Dropped: {dropped.name} ({dropped.reason})", err=True)


@app.command("hunks")
def hunks_cmd(
    diff_file: str = typer.Argument(..., help="Diff to parse, '-' for stdin"),
    file_name: str = typer.Option("-", "--file", help="file name to label the diff"),
):
    """Print the normalized header of every hunk in a unified diff."""
    if diff_file == "-":
        diff_text = sys.stdin.read()
    else:
        path = Path(diff_file)
        if not path.exists():
            raise typer.BadParameter(f"{path} not found", param_hint="DIFF_FILE")
        diff_text = path.read_text(encoding="utf-8")

    try:
        file_diff = parse_file_diff(file_name, diff_text)
    except PatchCoverageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(str(file_diff))
    typer.echo(f"Added lines: {len(file_diff.added_lines())}")


@app.callback()
def main():
    """
    patchcov: patch coverage for pull requests
    """
    pass


if __name__ == "__main__":
    app()
