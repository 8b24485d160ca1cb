"""Check execution components for validation sections.

This module provides the CheckExecutor class responsible for running individual
image checks within validation sections. It handles exception management,
record enrichment with the section name, and per-record logging.

Key Features:
- Individual check execution
- Exception handling and conversion to failed records
- Record enrichment with section names for traceability
- One log line per record, levelled by severity
"""

from loguru import logger

from image_pipeline.exceptions import CommandError

from .base import ImageCheck
from .context import ValidationContext
from .enums import Severity
from .models import CheckRecord

_LOG_LEVELS = {
    Severity.PASS: "INFO",
    Severity.INFO: "INFO",
    Severity.WARN: "WARNING",
    Severity.FAIL: "ERROR",
}


class CheckExecutor:
    """Handles individual check execution within validation sections.

    The CheckExecutor runs a single ImageCheck against the validation context,
    converts unexpected tool or filesystem errors into a failed record and
    tags every record with the section that produced it.

    Attributes:
        None (stateless executor - all state is in the records)
    """

    def execute_single_check(
        self,
        check: ImageCheck,
        context: ValidationContext,
        section_name: str,
    ) -> list[CheckRecord]:
        """Execute a single check and return its enriched records.

        Args:
            check: The ImageCheck instance to execute.
            context: Shared state of the running validation.
            section_name: Name of the section executing this check.

        Returns:
            list[CheckRecord]: Records produced by the check, each tagged with
                the section name. A check that raises yields one failed record.

        Raises:
            No exceptions are raised for tool, filesystem or parsing errors -
            they are captured and converted to failed records.
        """
        logger.debug("Running check: {}", check.name)

        try:
            records = check.run(context)
        except (CommandError, OSError, ValueError) as e:
            records = [self._handle_check_exception(check, e)]

        for record in records:
            record.section = section_name
            logger.log(_LOG_LEVELS[Severity(record.severity)], record.line)
        return records

    def _handle_check_exception(self, check: ImageCheck, e: Exception) -> CheckRecord:
        """Convert an exception raised by a check into a failed record.

        Args:
            check: The ImageCheck instance that threw the exception.
            e: The exception that was thrown during check execution.

        Returns:
            CheckRecord: A failed record naming the check and the error.
        """
        logger.debug("Check {} threw {}: {}", check.name, type(e).__name__, e)
        return CheckRecord(
            severity=Severity.FAIL,
            message=f"Check '{check.name}' could not run: {e}",
            check_name=check.name,
        )
