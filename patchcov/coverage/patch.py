import logging
from collections.abc import Mapping

from pydantic import BaseModel, Field

from patchcov.coverage.models import IGNORED_LINE, CoverageReport, SourceFile
from patchcov.diff.models import FileDiff
from patchcov.exceptions import LineOutOfRangeError, UnmappableLineError

logger = logging.getLogger(__name__)


class DroppedFile(BaseModel):
    name: str
    line_no: int
    reason: str


class PatchReportResult(BaseModel):
    report: CoverageReport
    dropped: list[DroppedFile] = Field(default_factory=list)


def count_lines(content: str) -> int:
    """Count lines the way git numbers them: only ``\\n`` ends a line."""
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


def build_file_patch_coverage(
    source_file: SourceFile,
    pr_diff: FileDiff,
    reconciliation_diff: FileDiff,
    line_count: int,
) -> SourceFile:
    """
    Restrict ``source_file`` to the lines ``pr_diff`` adds.

    Line numbers are those of the PR head. Each added line is carried through
    ``reconciliation_diff`` onto the revision the coverage was measured on
    before its hit count is copied. Every other line gets IGNORED_LINE.

    Raises:
        UnmappableLineError: an added line cannot be placed in the measured
            revision, so the file has no trustworthy patch coverage.
    """
    coverage: list[int | None] = [IGNORED_LINE] * line_count
    report_lines = len(source_file.coverage)

    for idx in range(line_count):
        line_no = idx + 1
        if not pr_diff.is_within_added_range(line_no):
            continue

        mapped_line_no = reconciliation_diff.translate_before_to_after(line_no)
        if not 1 <= mapped_line_no <= report_lines:
            raise LineOutOfRangeError(
                source_file.name, line_no, mapped_line_no, report_lines
            )
        coverage[idx] = source_file.coverage[mapped_line_no - 1]

    return SourceFile(
        name=source_file.name, blob_id=source_file.blob_id, coverage=coverage
    )


def build_patch_report(
    report: CoverageReport,
    pr_diffs: Mapping[str, FileDiff],
    reconciliation_diffs: Mapping[str, FileDiff],
    line_counts: Mapping[str, int],
    log: logging.Logger | None = None,
) -> PatchReportResult:
    """
    Build the patch coverage report for the files a pull request touches.

    Files without a PR diff are left out. A file whose added lines cannot be
    reconciled with the measured revision is dropped on its own and recorded
    in ``PatchReportResult.dropped``; the other files are unaffected.
    """
    log = log or logger
    patch_report = CoverageReport()
    dropped: list[DroppedFile] = []

    for file_name in sorted(report.source_files):
        pr_diff = pr_diffs.get(file_name)
        if pr_diff is None:
            continue

        reconciliation_diff = reconciliation_diffs.get(
            file_name, FileDiff(file_name=file_name)
        )
        log.debug("Patch check for %s\n%s", file_name, pr_diff)

        try:
            patch_file = build_file_patch_coverage(
                report.source_files[file_name],
                pr_diff,
                reconciliation_diff,
                line_counts[file_name],
            )
        except UnmappableLineError as exc:
            log.warning("Dropping %s from patch report: %s", file_name, exc)
            dropped.append(
                DroppedFile(name=file_name, line_no=exc.line_no, reason=str(exc))
            )
            continue

        patch_report.source_files[file_name] = patch_file

    log.info(
        "Patch report covers %d files (%d dropped)",
        len(patch_report.source_files),
        len(dropped),
    )
    return PatchReportResult(report=patch_report, dropped=dropped)
