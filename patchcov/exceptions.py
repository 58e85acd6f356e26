from pathlib import Path


class PatchCoverageError(Exception):
    """Base class for every error raised by patchcov."""


class HunkParseError(PatchCoverageError):
    def __init__(self, line: str, file_name: str | None = None):
        self.line = line
        self.file_name = file_name
        where = f" in diff for {file_name}" if file_name else ""
        super().__init__(f"Unable to get the line numbers for line{where}: '{line}'")


class UnmappableLineError(PatchCoverageError):
    """A line has no single counterpart in the target revision."""

    def __init__(self, file_name: str, line_no: int, message: str):
        self.file_name = file_name
        self.line_no = line_no
        super().__init__(message)


class ModifiedLineError(UnmappableLineError):
    def __init__(self, file_name: str, line_no: int):
        super().__init__(
            file_name,
            line_no,
            f"lineNo: {line_no} of {file_name} cannot be mapped correctly as it is modified",
        )


class LineOutOfRangeError(UnmappableLineError):
    def __init__(self, file_name: str, line_no: int, mapped_line_no: int, report_lines: int):
        self.mapped_line_no = mapped_line_no
        self.report_lines = report_lines
        super().__init__(
            file_name,
            line_no,
            f"lineNo: {line_no} of {file_name} maps to {mapped_line_no}, "
            f"past the {report_lines} lines in the coverage report",
        )


class GitCommandError(PatchCoverageError):
    def __init__(self, cmd_name: str, exit_code: int, stderr: str = ""):
        self.cmd_name = cmd_name
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"{cmd_name} failed with exit code {exit_code}{detail}")


class ConfigError(PatchCoverageError):
    pass


class ReportFormatError(PatchCoverageError):
    def __init__(self, report_path: Path | str, original_error: Exception | str):
        self.report_path = Path(report_path)
        self.original_error = original_error
        super().__init__(f"Invalid coverage report ({report_path}): {original_error}")
