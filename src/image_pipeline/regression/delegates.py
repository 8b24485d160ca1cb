"""Adapters from the concrete components to the stage delegate interfaces."""

from pathlib import Path

from loguru import logger

from image_pipeline.oxide import ProjectCleaner, RemoteTester, ResourceNames
from image_pipeline.validation import ImageValidator

from .models import WorkItem


class ValidatorDelegate:
    def __init__(self, validator: ImageValidator):
        self.validator = validator

    def validate(self, image_path: Path) -> int:
        return self.validator.validate(image_path).exit_code


class RemoteTestAdapter:
    """Runs the upload-and-boot test; resource names share one datestamp per run."""

    def __init__(self, tester: RemoteTester, datestamp: str | None = None):
        self.tester = tester
        self.datestamp = datestamp

    def plan_resources(self, item: WorkItem) -> ResourceNames:
        return self.tester.plan_resources(item.version, self.datestamp)

    def remote_test(self, item: WorkItem) -> int:
        report = self.tester.run(item.version, item.output_image, iso_path=item.iso_path, datestamp=self.datestamp)
        logger.info(report.summary_line)
        return report.exit_code


class CleanupAdapter:
    def __init__(self, cleaner: ProjectCleaner):
        self.cleaner = cleaner

    def cleanup(self, resources: ResourceNames) -> bool:
        return self.cleaner.cleanup(resources).ok
