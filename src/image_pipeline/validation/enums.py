"""Enums for the image validation system.

This module contains basic enums to avoid circular dependencies.
"""

from enum import StrEnum


class Severity(StrEnum):
    """Severity of one check record."""

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    INFO = "info"

    @property
    def tag(self) -> str:
        return f"[{self.name}]"


class SectionStatus(StrEnum):
    """Status of a validation section (group of related checks)."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    STOPPED = "stopped"  # A precondition inside the section failed
    ABORTED = "aborted"  # A critical check failed, validation ends here
    SKIPPED = "skipped"  # Not run because an earlier section aborted
