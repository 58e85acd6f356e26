import logging
import re

from patchcov.diff.models import FileDiff, Hunk
from patchcov.exceptions import HunkParseError

logger = logging.getLogger(__name__)

HUNK_MARKER = "@@"
HUNK_HEADER_RE = re.compile(
    r"@@ -(?P<line_before>\d+)(?:,(?P<count_before>\d+))? "
    r"\+(?P<line_after>\d+)(?:,(?P<count_after>\d+))? @@"
)


def _range_bounds(start: int, count: int) -> tuple[int, int]:
    # Empty sides anchor at the header line itself, non-empty ones one below
    # it, so the open interval holds exactly `start .. start + count - 1`.
    lower = start if count == 0 else start - 1
    return lower, lower + count + 1


def parse_hunk_header(line: str, file_name: str | None = None) -> Hunk:
    """
    Parse a hunk header such as ``@@ -32,0 +34,3 @@`` into a `Hunk`.

    A missing count means one line. Anything after the closing ``@@`` (git's
    function-name hint) is ignored.

    Raises:
        HunkParseError: the line does not follow the hunk header grammar.
    """
    match = HUNK_HEADER_RE.match(line)
    if match is None:
        raise HunkParseError(line, file_name)

    count_before = match.group("count_before")
    count_after = match.group("count_after")

    deleted_start, deleted_end = _range_bounds(
        int(match.group("line_before")),
        1 if count_before is None else int(count_before),
    )
    added_start, added_end = _range_bounds(
        int(match.group("line_after")),
        1 if count_after is None else int(count_after),
    )

    return Hunk(
        deleted_start=deleted_start,
        deleted_end=deleted_end,
        added_start=added_start,
        added_end=added_end,
    )


def parse_file_diff(file_name: str, diff_text: str) -> FileDiff:
    """
    Build a `FileDiff` from the zero-context diff output for one file.

    Hunks are kept in the order git emits them, which is already ascending.
    Any malformed header rejects the whole diff.
    """
    hunks: list[Hunk] = []
    for line in diff_text.split("\n"):
        if not line.startswith(HUNK_MARKER):
            continue
        hunks.append(parse_hunk_header(line, file_name))

    file_diff = FileDiff(file_name=file_name, hunks=tuple(hunks))
    logger.debug("Parsed diff\n%s", file_diff)
    return file_diff
