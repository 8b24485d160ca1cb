"""Section execution orchestration for image validation.

This module provides the ValidationExecutor class which runs validation
sections in order and handles aborts: once a section reports ABORTED, every
later section is recorded as SKIPPED without running.
"""

from loguru import logger

from .context import ValidationContext
from .enums import SectionStatus
from .models import SectionResult, ValidationReport
from .section import ValidationSection


class ValidationExecutor:
    """Handles the execution logic for validation sections.

    Attributes:
        None (stateless executor - manages execution flow only)
    """

    def execute_sections(
        self,
        sections: list[ValidationSection],
        context: ValidationContext,
        report: ValidationReport,
    ) -> ValidationReport:
        """Execute the sections sequentially, appending their results to ``report``.

        Args:
            sections: Validation sections to execute in order
            context: Shared state of the running validation
            report: Report receiving the section results

        Returns:
            ValidationReport: The same report, with one section result per section
        """
        logger.debug("Validation will execute {} sections", len(sections))

        for section in sections:
            section_result = section.execute(context)
            report.section_results.append(section_result)

            if section_result.status == SectionStatus.ABORTED:
                report.aborted = True
                report.message = section_result.message
                logger.error("Aborting: {}", section_result.message)
                self._mark_remaining_sections_skipped(report, section, sections)
                break

        return report

    def _mark_remaining_sections_skipped(
        self,
        report: ValidationReport,
        aborted_section: ValidationSection,
        all_sections: list[ValidationSection],
    ) -> None:
        """Mark remaining sections as skipped after an abort.

        Args:
            report: Report to update with skipped section results
            aborted_section: The section that aborted the validation
            all_sections: All sections (for finding remaining ones)
        """
        try:
            aborted_index = next(i for i, section in enumerate(all_sections) if section is aborted_section)
        except StopIteration:
            logger.warning("Could not find aborted section {}", aborted_section.name)
            return

        for section in all_sections[aborted_index + 1 :]:
            report.section_results.append(
                SectionResult(
                    section_name=section.name,
                    status=SectionStatus.SKIPPED,
                    message="Skipped due to aborted validation",
                    total_checks=len(section.checks),
                    skipped_checks=len(section.checks),
                )
            )
            logger.debug("Skipping section {} due to abort", section.name)
