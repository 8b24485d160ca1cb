"""Record processing and decision logic for validation sections.

This module provides the ResultProcessor class responsible for evaluating the
records a check produced and deciding how execution continues:

- a failed record from a critical check aborts the whole validation,
- a record flagged ``stop_section`` ends the current section only,
- anything else lets the section continue.

Typical Usage:
    processor = ResultProcessor()
    decision, reason = processor.process_check_records(check, records, "filesystem")

    if decision is SectionStatus.ABORTED:
        print(f"Aborting: {reason}")
"""

from loguru import logger

from .base import ImageCheck
from .enums import SectionStatus, Severity
from .models import CheckRecord, SectionResult


class ResultProcessor:
    """Handles record processing and decision logic for validation sections.

    Attributes:
        None (stateless processor - pure decision logic)
    """

    def process_check_records(
        self,
        check: ImageCheck,
        records: list[CheckRecord],
        section_name: str,
    ) -> tuple[SectionStatus | None, str]:
        """Process a check's records and determine if the section should stop.

        Args:
            check: The check that was executed
            records: The records from the check execution
            section_name: Name of the section for logging purposes

        Returns:
            tuple: (decision, reason)
                - decision: ABORTED, STOPPED, or None to continue
                - reason: Human-readable reason for stopping (empty if continuing)
        """
        has_failure = any(record.severity == Severity.FAIL for record in records)

        if has_failure and check.is_critical:
            logger.debug("Critical check {} failed, aborting validation", check.name)
            return SectionStatus.ABORTED, f"Critical check '{check.name}' failed in section '{section_name}'"

        if any(record.stop_section for record in records):
            logger.debug("Check {} stopped section {}", check.name, section_name)
            return SectionStatus.STOPPED, f"Section '{section_name}' stopped by check '{check.name}'"

        return None, ""

    def finalize_section_result(self, result: SectionResult, section_name: str) -> None:
        """Set final section status if still running.

        Args:
            result: The section result to finalize
            section_name: Name of the section
        """
        if result.status == SectionStatus.RUNNING:
            if result.failed == 0:
                result.status = SectionStatus.SUCCESS
                result.message = f"Section '{section_name}' passed: {result.passed} passed, {result.warnings} warnings"
            else:
                result.status = SectionStatus.FAILED
                result.message = f"Section '{section_name}' completed with {result.failed} failures"

    def mark_remaining_checks_skipped(
        self,
        result: SectionResult,
        stopping_check: ImageCheck,
        all_checks: list[ImageCheck],
        reason: str,
    ) -> None:
        """Count the checks after ``stopping_check`` as skipped.

        Skipped checks produce no records; a record is an assertion and a
        skipped check asserted nothing.

        Args:
            result: The section result to update
            stopping_check: The check that caused the section to stop
            all_checks: All checks in the section
            reason: The reason why checks are being skipped
        """
        try:
            stop_index = next(i for i, check in enumerate(all_checks) if check is stopping_check)
        except StopIteration:
            logger.warning("Could not find check {}", stopping_check.name)
            return

        for check in all_checks[stop_index + 1 :]:
            result.skipped_checks += 1
            logger.debug("Skipping check {} {}", check.name, reason)
