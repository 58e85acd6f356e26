from patchcov.coverage import (
    IGNORED_LINE,
    CoverageReport,
    PatchReportResult,
    SourceFile,
    build_patch_report,
)
from patchcov.diff import FileDiff, Hunk, parse_file_diff, parse_hunk_header
from patchcov.exceptions import (
    ConfigError,
    GitCommandError,
    HunkParseError,
    LineOutOfRangeError,
    ModifiedLineError,
    PatchCoverageError,
    ReportFormatError,
    UnmappableLineError,
)

__version__ = "0.1.0"

__all__ = [
    "IGNORED_LINE",
    "CoverageReport",
    "PatchReportResult",
    "SourceFile",
    "build_patch_report",
    "FileDiff",
    "Hunk",
    "parse_file_diff",
    "parse_hunk_header",
    "ConfigError",
    "GitCommandError",
    "HunkParseError",
    "LineOutOfRangeError",
    "ModifiedLineError",
    "PatchCoverageError",
    "ReportFormatError",
    "UnmappableLineError",
]
