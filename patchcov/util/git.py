import logging
import os
from pathlib import Path

from patchcov.util.process import check_exit_code, run_command

logger = logging.getLogger(__name__)

# CI providers that check out a detached HEAD expose the branch here instead.
BRANCH_ENV_VARS = (
    "GIT_BRANCH",
    "GITHUB_HEAD_REF",
    "CI_COMMIT_REF_NAME",
    "CIRCLE_BRANCH",
    "BUILDKITE_BRANCH",
)


def run_git(
    cmd_name: str,
    args: list[str],
    repo_dir: Path,
    timeout_sec: int,
) -> str:
    """Run ``git <args>`` in ``repo_dir`` and return raw stdout, raising on failure."""
    result = run_command(
        cmd_name=cmd_name,
        cmd=["git", *args],
        timeout=timeout_sec,
        cwd=repo_dir,
    )
    error = check_exit_code(result)
    if error is not None:
        raise error
    return result.stdout


def rev_parse(rev: str, repo_dir: Path, timeout_sec: int = 30) -> str:
    return run_git("git_rev_parse", ["rev-parse", rev], repo_dir, timeout_sec).strip()


def merge_base(
    first: str, second: str, repo_dir: Path, timeout_sec: int = 30
) -> str:
    return run_git(
        "git_merge_base", ["merge-base", first, second], repo_dir, timeout_sec
    ).strip()


def current_branch(repo_dir: Path, timeout_sec: int = 30) -> str:
    for name in BRANCH_ENV_VARS:
        value = os.getenv(name, "").strip()
        if value:
            logger.debug("Using branch %s from $%s", value, name)
            return value

    return run_git(
        "git_current_branch",
        ["rev-parse", "--abbrev-ref", "HEAD"],
        repo_dir,
        timeout_sec,
    ).strip()


def changed_files(
    from_rev: str, to_rev: str, repo_dir: Path, timeout_sec: int = 60
) -> list[str]:
    output = run_git(
        "git_diff_name_only",
        ["diff", "--name-only", from_rev, to_rev],
        repo_dir,
        timeout_sec,
    )
    return [line.strip() for line in output.splitlines() if line.strip()]


def diff_zero_context(
    from_rev: str,
    to_rev: str,
    path: str,
    repo_dir: Path,
    timeout_sec: int = 60,
) -> str:
    return run_git(
        "git_diff",
        ["diff", "-U0", from_rev, to_rev, "--", path],
        repo_dir,
        timeout_sec,
    )


def show_file(rev: str, path: str, repo_dir: Path, timeout_sec: int = 60) -> str:
    return run_git("git_show", ["show", f"{rev}:{path}"], repo_dir, timeout_sec)
