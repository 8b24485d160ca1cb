"""Report calculation and finalization for image validation.

The ReportCalculator flattens the section records into the report, tallies
them by severity and derives the overall status: FAIL iff at least one FAIL
record exists. Warnings never affect the status.
"""

import arrow
from loguru import logger

from .enums import Severity
from .models import ValidationReport, count_severity


class ReportCalculator:
    """Handles tallying and finalization of validation reports.

    Attributes:
        None (stateless calculator - operates on report objects)
    """

    def finalize_report(self, report: ValidationReport, start_time: float) -> ValidationReport:
        """Aggregate records and determine the overall status.

        Args:
            report: Report holding the completed section results
            start_time: Unix timestamp (float) when validation began

        Returns:
            ValidationReport: The same report with records, tallies, status
                and total execution time filled in
        """
        report.records = [record for section in report.section_results for record in section.records]
        report.passed = count_severity(report.records, Severity.PASS)
        report.failed = count_severity(report.records, Severity.FAIL)
        report.warnings = count_severity(report.records, Severity.WARN)

        if report.failed == 0:
            report.status = Severity.PASS
            report.message = "Image validation passed"
        else:
            report.status = Severity.FAIL
            if not report.message:
                report.message = f"Image validation completed with {report.failed} failures"

        report.total_execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        logger.info(report.summary_line)
        return report
