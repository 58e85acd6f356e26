from patchcov.coverage.io import dumps_report, load_report, save_report
from patchcov.coverage.models import (
    IGNORED_LINE,
    CoverageReport,
    LineCounts,
    SourceFile,
)
from patchcov.coverage.patch import (
    DroppedFile,
    PatchReportResult,
    build_file_patch_coverage,
    build_patch_report,
    count_lines,
)

__all__ = [
    "dumps_report",
    "load_report",
    "save_report",
    "IGNORED_LINE",
    "CoverageReport",
    "LineCounts",
    "SourceFile",
    "DroppedFile",
    "PatchReportResult",
    "build_file_patch_coverage",
    "build_patch_report",
    "count_lines",
]
