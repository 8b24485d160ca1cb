"""External command execution.

All collaborators (block-device tools, the remote platform CLI, the build
tool) go through ``CommandRunner`` so tests can substitute a fake runner.
"""

import shutil
import subprocess

from loguru import logger
from pydantic import BaseModel

from image_pipeline.exceptions import CommandError


class CommandResult(BaseModel):
    """Outcome of one external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands, optionally through sudo."""

    def __init__(self, use_sudo: bool = False, timeout: float | None = None):
        """Initialize the runner.

        Args:
            use_sudo: Prefix commands flagged as privileged with ``sudo``
            timeout: Optional timeout in seconds applied to every command
        """
        self.use_sudo = use_sudo
        self.timeout = timeout

    def run(
        self,
        args: list[str],
        *,
        privileged: bool = False,
        check: bool = False,
        capture: bool = True,
    ) -> CommandResult:
        """Run a command and return its result.

        Args:
            args: Command line
            privileged: Run through sudo when the runner is configured for it
            check: Raise ``CommandError`` on a non-zero exit code
            capture: Capture stdout/stderr; when False output goes to the terminal

        Returns:
            CommandResult: exit code and captured output

        Raises:
            CommandError: If ``check`` is set and the command fails, or the
                executable cannot be started
        """
        argv = ["sudo", *args] if privileged and self.use_sudo else list(args)
        logger.trace("Running: {}", " ".join(argv))
        try:
            completed = subprocess.run(
                argv,
                capture_output=capture,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise CommandError(argv, 127, str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(argv, 124, f"timed out after {e.timeout}s") from e

        result = CommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if check and not result.ok:
            raise CommandError(argv, result.returncode, result.stderr)
        return result

    def which(self, tool: str) -> str | None:
        """Return the resolved path of ``tool`` on PATH, or None."""
        return shutil.which(tool)
