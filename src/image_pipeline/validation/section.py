"""Validation section implementation for grouped checks.

A section is a logical grouping of related image checks (tool availability,
partition table, OS filesystem, ...). Checks in a section run in order; a
check can stop its own section when a precondition is missing, and a failing
critical check aborts the validation altogether.

Typical Usage:
    section = (
        ValidationSection(name="partition_table", description="GPT layout and shrink")
        .add_check(GptIntegrityCheck())
        .add_check(PartitionLayoutCheck())
    )

    result = section.execute(context)
"""

import arrow
from loguru import logger

from .base import ImageCheck
from .check_executor import CheckExecutor
from .context import ValidationContext
from .enums import SectionStatus
from .models import SectionResult
from .processor import ResultProcessor


class ValidationSection:
    """A validation section containing logically related checks.

    Attributes:
        name: Unique identifier for this section
        description: Human-readable description, printed as the section header
        checks: List of ImageCheck objects in this section
    """

    def __init__(self, name: str, description: str):
        """Initialize the section.

        Args:
            name: Name of this section (used for identification and logging)
            description: Description of what this section checks
        """
        self.name = name
        self.description = description
        self.checks: list[ImageCheck] = []

        self._check_executor = CheckExecutor()
        self._result_processor = ResultProcessor()

    def add_check(self, check: ImageCheck) -> "ValidationSection":
        """Add a check to this section (fluent interface)."""
        self.checks.append(check)
        return self

    def add_checks(self, checks: list[ImageCheck]) -> "ValidationSection":
        """Add multiple checks to this section."""
        self.checks.extend(checks)
        return self

    def get_check(self, check_name: str) -> ImageCheck | None:
        return next((check for check in self.checks if check.name == check_name), None)

    def get_check_names(self) -> list[str]:
        return [check.name for check in self.checks]

    def execute(self, context: ValidationContext) -> SectionResult:
        """Execute all checks in this section sequentially.

        Args:
            context: Shared state of the running validation

        Returns:
            SectionResult: Records and status of this section. The status is
                ABORTED when a critical check failed.
        """
        logger.info("==> {}", self.description)
        start_time = arrow.utcnow().float_timestamp

        result = SectionResult(
            section_name=self.name,
            status=SectionStatus.RUNNING,
            message=f"Executing {self.name} section",
            executed_at=arrow.utcnow().isoformat(),
            total_checks=len(self.checks),
        )

        for check in self.checks:
            if self._execute_single_check(check, context, result):
                break

        self._result_processor.finalize_section_result(result, self.name)

        result.execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        logger.debug("Section {} completed with status {} in {:.1f}ms", self.name, result.status, result.execution_time_ms)
        return result

    def _execute_single_check(self, check: ImageCheck, context: ValidationContext, result: SectionResult) -> bool:
        """Execute a single check and update the result.

        Returns:
            bool: True if section execution should stop, False to continue
        """
        records = self._check_executor.execute_single_check(check, context, self.name)
        result.records.extend(records)
        result.executed_checks += 1

        decision, reason = self._result_processor.process_check_records(check, records, self.name)
        if decision is None:
            return False

        result.status = decision
        result.message = reason
        self._result_processor.mark_remaining_checks_skipped(result, check, self.checks, f"due to {decision} section")
        return True

    def __str__(self) -> str:
        return f"ValidationSection(name='{self.name}', checks={len(self.checks)})"

    def __repr__(self) -> str:
        return f"ValidationSection(name='{self.name}', description='{self.description}', checks={len(self.checks)})"
