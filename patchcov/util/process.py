import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from patchcov.exceptions import GitCommandError

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
NOT_FOUND_EXIT_CODE = 127


@dataclass
class CommandResult:
    cmd_name: str
    cmd: list[str]
    exit_code: int
    stdout: str
    stderr: str


def run_command(
    cmd_name: str,
    cmd: list[str],
    timeout: int,
    cwd: Path | None = None,
) -> CommandResult:
    """
    Run ``cmd`` and capture its output as text.

    Output is decoded without newline translation, so a lone ``\\r`` in a
    file shown by git stays inside its line.

    A timeout is reported as exit code 124 and a missing executable as 127,
    mirroring the shell, so callers only ever inspect ``exit_code``.
    """
    logger.debug("Running %s: %s", cmd_name, " ".join(cmd))
    try:
        run_result = subprocess.run(
            args=cmd,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            cmd_name=cmd_name,
            cmd=cmd,
            exit_code=TIMEOUT_EXIT_CODE,
            stdout="",
            stderr=f"Execution timed out after {timeout} seconds",
        )
    except FileNotFoundError as e:
        return CommandResult(
            cmd_name=cmd_name,
            cmd=cmd,
            exit_code=NOT_FOUND_EXIT_CODE,
            stdout="",
            stderr=str(e),
        )

    return CommandResult(
        cmd_name=cmd_name,
        cmd=cmd,
        exit_code=run_result.returncode,
        stdout=_decode(run_result.stdout),
        stderr=_decode(run_result.stderr),
    )


def _decode(output: bytes) -> str:
    return output.decode("utf-8", errors="replace")


def check_exit_code(result: CommandResult, success: int = 0) -> GitCommandError | None:
    if result.exit_code == success:
        return None
    return GitCommandError(result.cmd_name, result.exit_code, result.stderr)
