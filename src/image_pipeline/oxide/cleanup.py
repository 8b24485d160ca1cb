"""Best-effort removal of remote resources.

Instances are stopped (and waited for) before deletion; disks go through the
reconciler; snapshots and images are deleted directly. Nothing here raises
for a remote failure: every problem is a warning on the report.
"""

import time
from collections.abc import Callable

from loguru import logger
from pydantic import BaseModel, Field
from tenacity import RetryCallState, Retrying, before_sleep_log, retry_if_result, stop_after_attempt, wait_fixed

from image_pipeline.exceptions import RemoteCommandError

from .client import OxideClient
from .models import InstanceState, ResourceNames
from .reconciler import DiskReconciler


class CleanupReport(BaseModel):
    deleted: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


class ProjectCleaner:
    """Deletes instances, disks, snapshots and images from a project."""

    def __init__(
        self,
        client: OxideClient,
        reconciler: DiskReconciler | None = None,
        stop_attempts: int = 24,
        stop_interval_s: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the cleaner.

        Args:
            client: Platform client scoped to the project
            reconciler: Disk reconciler (one is created for ``client`` if omitted)
            stop_attempts: State polls while waiting for an instance to stop
            stop_interval_s: Fixed interval between those polls
            sleep: Sleep function between polls (replaceable in tests)
        """
        self.client = client
        self.reconciler = reconciler or DiskReconciler(client)
        self.stop_attempts = stop_attempts
        self.stop_interval_s = stop_interval_s
        self.sleep = sleep

    def cleanup(self, resources: ResourceNames) -> CleanupReport:
        """Remove the resources one work item created."""
        logger.info("Cleaning up resources of {}", resources.disk)
        report = CleanupReport()
        self._remove_instance(resources.instance, report)
        self._remove_disk(resources.disk, report)
        self._delete("snapshot", resources.snapshot, report)
        self._delete("image", resources.image, report)
        return report

    def cleanup_project(self) -> CleanupReport:
        """Remove every instance, disk, snapshot and image in the project."""
        report = CleanupReport()
        for kind, remove in (
            ("instance", self._remove_instance),
            ("disk", self._remove_disk),
            ("snapshot", lambda name, rep: self._delete("snapshot", name, rep)),
            ("image", lambda name, rep: self._delete("image", name, rep)),
        ):
            logger.info("==> Collecting {}s ...", kind)
            try:
                names = self.client.list_names(kind)
            except RemoteCommandError as e:
                self._warn(report, f"Could not list {kind}s: {e.stderr or e}")
                continue
            if not names:
                logger.info("No {}s found", kind)
            for name in names:
                remove(name, report)

        logger.info("Done. Resources removed from project '{}'", self.client.project)
        return report

    def _remove_instance(self, instance: str, report: CleanupReport) -> None:
        state = self._instance_state(instance)
        if state is None or state.is_terminal:
            logger.info("Instance '{}' is {}, no stop needed", instance, state or "not found")
        else:
            logger.info("Stopping instance '{}' (state: {})", instance, state)
            try:
                self.client.stop_instance(instance)
            except RemoteCommandError as e:
                logger.debug("Stop request for '{}' failed: {}", instance, e)

            state = self._wait_until_stopped(instance)
            if state is not None and not state.is_terminal:
                self._warn(report, f"Instance '{instance}' did not stop in time (state: {state}), attempting delete anyway")

        self._delete("instance", instance, report)

    def _wait_until_stopped(self, instance: str) -> InstanceState | None:
        """Poll at a fixed interval until the instance is stopped, failed or gone.

        Returns the last state seen (None means not found).
        """

        def still_running(state: InstanceState | None) -> bool:
            return state is not None and not state.is_terminal

        def last_state(retry_state: RetryCallState) -> InstanceState | None:
            return retry_state.outcome.result()

        retrying = Retrying(
            stop=stop_after_attempt(self.stop_attempts),
            wait=wait_fixed(self.stop_interval_s),
            retry=retry_if_result(still_running),
            retry_error_callback=last_state,
            before_sleep=before_sleep_log(logger, "DEBUG"),
            sleep=self.sleep,
        )
        return retrying(self._instance_state, instance)

    def _instance_state(self, instance: str) -> InstanceState | None:
        """Current run state, or None when the instance cannot be found."""
        try:
            return self.client.get_instance_state(instance)
        except RemoteCommandError:
            return None

    def _remove_disk(self, disk: str, report: CleanupReport) -> None:
        result = self.reconciler.make_deletable(disk)
        report.warnings.extend(result.warnings)
        if result.deleted:
            report.deleted.append(f"disk/{disk}")

    def _delete(self, kind: str, name: str, report: CleanupReport) -> None:
        try:
            self.client.delete(kind, name)
        except RemoteCommandError as e:
            logger.debug("Delete of {} '{}' failed: {}", kind, name, e)
            logger.info("{} '{}' already gone", kind.capitalize(), name)
            return
        report.deleted.append(f"{kind}/{name}")
        logger.info("Deleted {} '{}'", kind, name)

    @staticmethod
    def _warn(report: CleanupReport, message: str) -> None:
        logger.warning(message)
        report.warnings.append(message)
