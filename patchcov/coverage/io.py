import json
import logging
import sys
from pathlib import Path

from filelock import FileLock
from pydantic import ValidationError

from patchcov.coverage.models import CoverageReport
from patchcov.exceptions import ReportFormatError

logger = logging.getLogger(__name__)

STDOUT_PATH = "-"


def load_report(report_path: Path) -> CoverageReport:
    """
    Read a formatted coverage report.

    Raises:
        ReportFormatError: the file is missing, is not JSON, or does not look
            like a coverage report.
    """
    report_path = Path(report_path)
    if not report_path.exists():
        raise ReportFormatError(report_path, "file not found")

    try:
        with report_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ReportFormatError(report_path, exc) from exc

    if not isinstance(raw, dict):
        raise ReportFormatError(report_path, "top-level value must be an object")

    try:
        report = CoverageReport.model_validate(raw)
    except ValidationError as exc:
        raise ReportFormatError(report_path, exc) from exc

    logger.debug(
        "Loaded %d source files from %s", len(report.source_files), report_path
    )
    return report


def dumps_report(report: CoverageReport) -> str:
    return json.dumps(report.to_output(), indent=2) + "\n"


def save_report(report: CoverageReport, output: Path | str) -> Path | None:
    """
    Write ``report`` as JSON to ``output``, or to stdout when it is ``-``.

    Returns the path written, or None for stdout.
    """
    content = dumps_report(report)

    if str(output) == STDOUT_PATH:
        sys.stdout.write(content)
        sys.stdout.flush()
        return None

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)

    lock = FileLock(str(path) + ".lock")
    with lock:
        path.write_text(content, encoding="utf-8", newline="\n")

    logger.info("Wrote %d source files to %s", len(report.source_files), path)
    return path
