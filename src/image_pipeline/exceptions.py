"""Common exceptions for the image pipeline.

Every external tool call is classified by the caller; these exceptions carry
enough context (command line, exit code, stderr) to turn a failed call into a
check record or a warning.
"""


class PipelineError(Exception):
    """Base exception for all image pipeline errors."""


class CommandError(PipelineError):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"Command '{' '.join(command)}' failed with exit code {returncode}{detail}")


class RemoteCommandError(CommandError):
    """Raised when the remote platform CLI fails or returns unusable output."""


class PreconditionError(PipelineError):
    """Raised when a required tool, file or configuration value is missing."""
