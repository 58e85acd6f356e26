from patchcov.diff.models import FileDiff, Hunk
from patchcov.diff.parser import (
    HUNK_HEADER_RE,
    parse_file_diff,
    parse_hunk_header,
)

__all__ = [
    "FileDiff",
    "Hunk",
    "HUNK_HEADER_RE",
    "parse_file_diff",
    "parse_hunk_header",
]
