from pydantic import BaseModel, ConfigDict

from patchcov.exceptions import ModifiedLineError


class Hunk(BaseModel):
    """
    Line ranges touched by one `@@ -B,CB +A,CA @@` block of a unified diff.

    Both ranges are open intervals: a line number ``n`` belongs to the deleted
    side when ``deleted_start < n < deleted_end`` (before-numbering) and to the
    added side when ``added_start < n < added_end`` (after-numbering). A zero
    count gives an empty interval whose endpoints still mark where the
    insertion or deletion happened.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    deleted_start: int
    deleted_end: int
    added_start: int
    added_end: int

    @property
    def deleted_count(self) -> int:
        return self.deleted_end - self.deleted_start - 1

    @property
    def added_count(self) -> int:
        return self.added_end - self.added_start - 1

    def deletes(self, line_no: int) -> bool:
        return self.deleted_start < line_no < self.deleted_end

    def adds(self, line_no: int) -> bool:
        return self.added_start < line_no < self.added_end

    def header(self) -> str:
        """Render the canonical hunk header this hunk was parsed from."""
        removed = _render_side("-", self.deleted_start, self.deleted_count)
        added = _render_side("+", self.added_start, self.added_count)
        return f"@@ {removed} {added} @@"

    def __str__(self) -> str:
        return self.header()


def _render_side(sign: str, start: int, count: int) -> str:
    if count == 0:
        return f"{sign}{start},0"
    if count == 1:
        return f"{sign}{start + 1}"
    return f"{sign}{start + 1},{count}"


class FileDiff(BaseModel):
    """Hunks of one file between two revisions, in ascending order."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    file_name: str
    hunks: tuple[Hunk, ...] = ()

    def is_within_deleted_range(self, line_no: int) -> bool:
        return any(hunk.deletes(line_no) for hunk in self.hunks)

    def is_within_added_range(self, line_no: int) -> bool:
        return any(hunk.adds(line_no) for hunk in self.hunks)

    def translate_before_to_after(self, line_no: int) -> int:
        """
        Map a before-revision line number to its after-revision line number.

        The mapping is anchored on the nearest hunk that ends at or before
        ``line_no``: every hunk header states its after-side position in
        absolute terms, so no running offset is needed. Lines ahead of the
        first hunk keep their number.

        Raises:
            ModifiedLineError: ``line_no`` lies inside a deleted range and has
                no single counterpart in the after revision.
        """
        preceding: Hunk | None = None
        for hunk in self.hunks:
            if hunk.deletes(line_no):
                raise ModifiedLineError(self.file_name, line_no)
            if line_no >= hunk.deleted_end:
                preceding = hunk

        if preceding is None:
            return line_no

        return preceding.added_end + (line_no - preceding.deleted_end)

    def added_lines(self) -> list[int]:
        lines: list[int] = []
        for hunk in self.hunks:
            lines.extend(range(hunk.added_start + 1, hunk.added_end))
        return lines

    def __str__(self) -> str:
        out = [f"fileName: {self.file_name}"]
        for idx, hunk in enumerate(self.hunks):
            out.append(f"diffLines[{idx}]: {hunk.header()}")
        return "\n".join(out)
