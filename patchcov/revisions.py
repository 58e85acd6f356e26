import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from patchcov.config import Settings
from patchcov.coverage.patch import count_lines
from patchcov.diff.models import FileDiff
from patchcov.diff.parser import parse_file_diff
from patchcov.exceptions import ConfigError
from patchcov.util import git

logger = logging.getLogger(__name__)


class RevisionContext(BaseModel):
    """Branches, commits and changed files a patch report is computed from."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    base_branch: str
    head_branch: str
    head_tip_commit: str
    last_merge_commit: str
    merge_base_commit: str
    pr_files: tuple[str, ...] = ()
    repo_dir: Path = Path(".")
    timeout_sec: int = 60

    def describe(self) -> str:
        return "\n".join(
            [
                f"base-branch: {self.base_branch}",
                f"head-branch: {self.head_branch}",
                f"head-tip-commit: {self.head_tip_commit}",
                f"last-merge-commit: {self.last_merge_commit}",
                f"merge-base-commit: {self.merge_base_commit}",
                f"pr-files: {', '.join(self.pr_files)}",
            ]
        )


def resolve_revision_context(settings: Settings) -> RevisionContext:
    """
    Fill in every revision the settings leave open.

    The head tip defaults to the remote tip of the head branch and the last
    merge commit to the local head branch pointer, which is what CI checks out
    after merging the base branch in.

    Raises:
        ConfigError: no base branch was given.
        GitCommandError: a revision could not be resolved.
    """
    if not settings.base_branch:
        raise ConfigError("base-branch is required")

    repo_dir = settings.repo_dir
    timeout_sec = settings.timeout_sec

    head_branch = settings.head_branch or git.current_branch(repo_dir, timeout_sec)
    head_tip_commit = settings.head_tip_commit or git.rev_parse(
        f"origin/{head_branch}", repo_dir, timeout_sec
    )
    last_merge_commit = settings.last_merge_commit or git.rev_parse(
        head_branch, repo_dir, timeout_sec
    )
    merge_base_commit = git.merge_base(
        settings.base_branch, head_tip_commit, repo_dir, timeout_sec
    )
    pr_files = git.changed_files(
        merge_base_commit, head_tip_commit, repo_dir, timeout_sec
    )

    context = RevisionContext(
        base_branch=settings.base_branch,
        head_branch=head_branch,
        head_tip_commit=head_tip_commit,
        last_merge_commit=last_merge_commit,
        merge_base_commit=merge_base_commit,
        pr_files=tuple(pr_files),
        repo_dir=repo_dir,
        timeout_sec=timeout_sec,
    )
    logger.info("Resolved revisions\n%s", context.describe())
    return context


def collect_file_diffs(
    context: RevisionContext,
) -> tuple[dict[str, FileDiff], dict[str, FileDiff]]:
    """
    Parse both diffs for every file the PR changes.

    Returns ``(pr_diffs, reconciliation_diffs)``: merge-base to head tip, and
    head tip to the last merge commit, keyed by path.
    """
    pr_diffs: dict[str, FileDiff] = {}
    reconciliation_diffs: dict[str, FileDiff] = {}

    for file_name in context.pr_files:
        pr_diff_text = git.diff_zero_context(
            context.merge_base_commit,
            context.head_tip_commit,
            file_name,
            context.repo_dir,
            context.timeout_sec,
        )
        pr_diffs[file_name] = parse_file_diff(file_name, pr_diff_text)

        reconciliation_text = git.diff_zero_context(
            context.head_tip_commit,
            context.last_merge_commit,
            file_name,
            context.repo_dir,
            context.timeout_sec,
        )
        reconciliation_diffs[file_name] = parse_file_diff(
            file_name, reconciliation_text
        )

    logger.debug("Collected diffs for %d files", len(pr_diffs))
    return pr_diffs, reconciliation_diffs


def read_line_counts(context: RevisionContext, files: list[str]) -> dict[str, int]:
    """Count the lines of each file as it stands at the head tip."""
    line_counts: dict[str, int] = {}
    for file_name in files:
        content = git.show_file(
            context.head_tip_commit, file_name, context.repo_dir, context.timeout_sec
        )
        line_counts[file_name] = count_lines(content)
    return line_counts
