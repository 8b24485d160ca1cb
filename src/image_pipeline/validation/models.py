"""Data models for the image validation system.

This module contains Pydantic models used throughout the validator to avoid
circular dependencies between components.
"""

import arrow
from pydantic import BaseModel, Field

from .enums import SectionStatus, Severity


class CheckRecord(BaseModel):
    """One atomic assertion produced by a check.

    Records are deterministic for a given image: they never carry temporary
    paths, device names or timestamps.
    """

    model_config = {"use_enum_values": True}

    severity: Severity
    message: str
    check_name: str
    section: str | None = None
    stop_section: bool = False

    @property
    def line(self) -> str:
        return f"{Severity(self.severity).tag} {self.message}"


def count_severity(records: list[CheckRecord], severity: Severity) -> int:
    return sum(1 for record in records if record.severity == severity)


class SectionResult(BaseModel):
    """Result of a validation section."""

    model_config = {"use_enum_values": True}

    section_name: str
    status: SectionStatus
    message: str
    records: list[CheckRecord] = Field(default_factory=list)
    executed_at: str | None = None  # ISO 8601 UTC timestamp
    execution_time_ms: float | None = None
    total_checks: int = 0
    executed_checks: int = 0
    skipped_checks: int = 0

    @property
    def passed(self) -> int:
        return count_severity(self.records, Severity.PASS)

    @property
    def failed(self) -> int:
        return count_severity(self.records, Severity.FAIL)

    @property
    def warnings(self) -> int:
        return count_severity(self.records, Severity.WARN)


class ValidationReport(BaseModel):
    """Complete result of validating one image."""

    model_config = {"use_enum_values": True}

    image_path: str
    status: Severity = Severity.PASS
    message: str = ""
    section_results: list[SectionResult] = Field(default_factory=list)
    records: list[CheckRecord] = Field(default_factory=list)
    aborted: bool = False
    executed_at: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    total_execution_time_ms: float | None = None
    passed: int = 0
    failed: int = 0
    warnings: int = 0

    @property
    def exit_code(self) -> int:
        return 1 if self.failed > 0 else 0

    @property
    def summary_line(self) -> str:
        return f"validate-image: {self.passed} passed, {self.failed} failed, {self.warnings} warnings"
