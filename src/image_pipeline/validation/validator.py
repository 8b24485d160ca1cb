"""Image validator: the entry point for structural validation of a raw image.

Typical Usage:
    validator = build_image_validator(get_settings())
    report = validator.validate(Path("output/windows-server-2022.raw"))

    print(report.summary_line)
    raise SystemExit(report.exit_code)
"""

from pathlib import Path

import arrow
from loguru import logger

from image_pipeline.system import BlockDeviceTools, HiveReader

from .calculator import ReportCalculator
from .context import ValidationContext
from .executor import ValidationExecutor
from .models import ValidationReport
from .section import ValidationSection


class ImageValidator:
    """Runs validation sections over one image inside a private context.

    Each ``validate`` call owns its workspace, loop device and mounts; they
    are released before the call returns, whatever happened in between.
    The input image is never modified.

    Attributes:
        sections: ValidationSection objects executed in order
    """

    def __init__(
        self,
        sections: list[ValidationSection],
        tools: BlockDeviceTools,
        hive_reader: HiveReader,
        tmp_root: Path | None = None,
    ):
        """Initialize the validator.

        Args:
            sections: Validation sections to execute in order
            tools: Block-device tool wrapper shared by the checks
            hive_reader: Registry hive reader for boot configuration checks
            tmp_root: Parent directory for per-run workspaces (system default if None)
        """
        self.sections = sections
        self.tools = tools
        self.hive_reader = hive_reader
        self.tmp_root = tmp_root

        self._executor = ValidationExecutor()
        self._calculator = ReportCalculator()

    def validate(self, image_path: Path) -> ValidationReport:
        """Validate ``image_path`` and return the finalized report.

        Args:
            image_path: Raw disk image to validate

        Returns:
            ValidationReport: records, tallies, status and exit code
        """
        logger.info("Validating image {}", image_path)
        start_time = arrow.utcnow().float_timestamp
        report = ValidationReport(image_path=str(image_path))

        with ValidationContext(image_path, self.tools, self.hive_reader, self.tmp_root) as context:
            self._executor.execute_sections(self.sections, context, report)

        return self._calculator.finalize_report(report, start_time)

    def get_section(self, section_name: str) -> ValidationSection | None:
        return next((section for section in self.sections if section.name == section_name), None)

    def get_section_names(self) -> list[str]:
        return [section.name for section in self.sections]

    def __str__(self) -> str:
        return f"ImageValidator(sections={len(self.sections)})"
