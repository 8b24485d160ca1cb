"""Base abstractions for image validation checks."""

from abc import ABC, abstractmethod

from .context import ValidationContext
from .enums import Severity
from .models import CheckRecord


class ImageCheck(ABC):
    """Abstract base class for individual image checks.

    A check inspects the ``ValidationContext`` and returns zero or more
    records. Checks never raise for an assertion that does not hold; they
    return a failed record instead.
    """

    def __init__(self, name: str, is_critical: bool = False):
        """Initialize the check.

        Args:
            name: The name of this check (used in record.check_name)
            is_critical: If True, a failed record aborts the whole validation
        """
        self.name = name
        self.is_critical = is_critical

    @abstractmethod
    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        """Run the check against the context and return its records."""

    def run(self, context: ValidationContext) -> list[CheckRecord]:
        return self._execute(context)

    def _record(self, severity: Severity, message: str, stop_section: bool = False) -> CheckRecord:
        return CheckRecord(severity=severity, message=message, check_name=self.name, stop_section=stop_section)

    def passed(self, message: str) -> CheckRecord:
        """Return a passing record."""
        return self._record(Severity.PASS, message)

    def failed(self, message: str) -> CheckRecord:
        """Return a failing record."""
        return self._record(Severity.FAIL, message)

    def warning(self, message: str) -> CheckRecord:
        """Return a warning record (degraded capability, never a failure)."""
        return self._record(Severity.WARN, message)

    def info(self, message: str) -> CheckRecord:
        """Return an informational record."""
        return self._record(Severity.INFO, message)

    def stop_section(self, message: str) -> CheckRecord:
        """Return a failing record that also stops the current section.

        Use when a precondition of the section is missing (e.g. a partition
        cannot be mounted), making the remaining checks in the section
        meaningless. Later sections still run.
        """
        return self._record(Severity.FAIL, message, stop_section=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', is_critical={self.is_critical})"
