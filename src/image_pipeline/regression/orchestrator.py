"""Regression pipeline: build, validate, remote-test and clean up each version.

Work items run strictly one after another, and so do the stages of an item.
Eligibility of each stage:

- Build: skipped on request, else Pass/Fail from the build exit code.
- Validate: skipped when the build was skipped and no image exists, or when
  the build failed.
- RemoteTest: skipped on request or when Validate did not pass.
- Cleanup: always attempted unless disabled; its failure is a warning and
  never changes the item's verdict.

Typical Usage:
    pipeline = RegressionPipeline(builder, validator, remote_tester, cleaner)
    summary = pipeline.run(items, RunOptions(skip_build=True))
    raise SystemExit(summary.exit_code)
"""

from collections.abc import Callable

import arrow
from loguru import logger

from image_pipeline.exceptions import PipelineError

from .collaborators import BuildDelegate, CleanupDelegate, RemoteTestDelegate, ValidateDelegate
from .enums import StageName, StageStatus
from .models import RegressionSummary, RunOptions, StageResult, WorkItem


class RegressionPipeline:
    """Drives the per-item stage sequence and collects the result matrix."""

    def __init__(
        self,
        builder: BuildDelegate,
        validator: ValidateDelegate,
        remote_tester: RemoteTestDelegate | None = None,
        cleaner: CleanupDelegate | None = None,
    ):
        """Initialize the pipeline.

        Args:
            builder: Image build collaborator
            validator: Structural validator collaborator
            remote_tester: Upload-and-boot collaborator; RemoteTest is skipped without one
            cleaner: Remote cleanup collaborator; Cleanup is skipped without one
        """
        self.builder = builder
        self.validator = validator
        self.remote_tester = remote_tester
        self.cleaner = cleaner

    def run(self, items: list[WorkItem], options: RunOptions | None = None) -> RegressionSummary:
        """Process every item in order and return the summary.

        Args:
            items: Work items in configured order
            options: Skip flags for the run

        Returns:
            RegressionSummary: items with one result per stage, and the run verdict
        """
        options = options or RunOptions()
        start_time = arrow.utcnow().float_timestamp
        summary = RegressionSummary(options=options)
        logger.info("Regression run for versions: {}", " ".join(item.version for item in items))

        for item in items:
            self._run_item(item, options)
            summary.items.append(item)

        summary.total_execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        return summary

    def _run_item(self, item: WorkItem, options: RunOptions) -> None:
        logger.info("==> VERSION: Windows Server {}", item.version)
        if self.remote_tester is not None:
            item.resources = self.remote_tester.plan_resources(item)

        build = item.record(self._build_stage(item, options))
        validate = item.record(self._validate_stage(item, build))
        item.record(self._remote_test_stage(item, validate, options))
        item.record(self._cleanup_stage(item, options))

        for result in item.results:
            logger.debug("[{}] {}: {} {}", item.version, result.stage, result.status, result.message)

    def _build_stage(self, item: WorkItem, options: RunOptions) -> StageResult:
        if options.skip_build:
            return self._skip(item, StageName.BUILD, "build skipped (--skip-build)")
        return self._invoke(item, StageName.BUILD, self.builder.build, item)

    def _validate_stage(self, item: WorkItem, build: StageResult) -> StageResult:
        if build.status == StageStatus.SKIP and not item.output_image.is_file():
            return self._skip(item, StageName.VALIDATE, f"{item.output_image} not found, skipping validate")
        if build.status == StageStatus.FAIL:
            return self._skip(item, StageName.VALIDATE, "validate skipped, build failed")
        return self._invoke(item, StageName.VALIDATE, self.validator.validate, item.output_image)

    def _remote_test_stage(self, item: WorkItem, validate: StageResult, options: RunOptions) -> StageResult:
        if options.skip_remote_test:
            return self._skip(item, StageName.REMOTE_TEST, "remote test skipped (--skip-remote-test)")
        if self.remote_tester is None:
            return self._skip(item, StageName.REMOTE_TEST, "remote test skipped, no remote project configured")
        if validate.status != StageStatus.PASS:
            return self._skip(item, StageName.REMOTE_TEST, "remote test skipped, validate failed or skipped")
        return self._invoke(item, StageName.REMOTE_TEST, self.remote_tester.remote_test, item)

    def _cleanup_stage(self, item: WorkItem, options: RunOptions) -> StageResult:
        if options.no_cleanup:
            return self._skip(item, StageName.CLEANUP, "cleanup skipped (--no-cleanup)")
        if self.cleaner is None or item.resources is None:
            return self._skip(item, StageName.CLEANUP, "cleanup skipped, no remote resources configured")

        logger.info("==> [{}] Cleaning up remote resources ...", item.version)
        try:
            ok = self.cleaner.cleanup(item.resources)
        except (PipelineError, OSError) as e:
            logger.debug("Cleanup raised: {}", e)
            ok = False

        if ok:
            logger.info("[{}] cleanup done", item.version)
            return StageResult.from_exit_code(StageName.CLEANUP, 0, "cleanup done")
        logger.warning("[{}] cleanup incomplete (resources may remain)", item.version)
        return StageResult.from_exit_code(StageName.CLEANUP, 1, "cleanup incomplete (resources may remain)")

    def _invoke(self, item: WorkItem, stage: StageName, delegate: Callable[..., int], *args) -> StageResult:
        """Run a delegate; an exception it raises counts as exit code 1."""
        logger.info("==> [{}] Running {} ...", item.version, stage)
        try:
            exit_code = delegate(*args)
        except (PipelineError, OSError) as e:
            logger.error("[{}] {} raised: {}", item.version, stage, e)
            exit_code = 1

        result = StageResult.from_exit_code(stage, exit_code)
        if result.status == StageStatus.PASS:
            logger.info("[{}] {} completed", item.version, stage)
        else:
            result.message = f"{stage} exited with rc={exit_code}"
            logger.error("[{}] {}", item.version, result.message)
        return result

    @staticmethod
    def _skip(item: WorkItem, stage: StageName, message: str) -> StageResult:
        logger.info("[{}] {}", item.version, message)
        return StageResult.skipped(stage, message)
