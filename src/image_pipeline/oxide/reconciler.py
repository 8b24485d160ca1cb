"""Drive a disk out of its import states so it can be deleted.

A disk left mid-import cannot be deleted directly. The transitions are::

    importing_from_bulk_writes --(stop)--> import_ready --(finalize)--> detached

Any other state (including ``detached`` and unknown states) is assumed to be
deletable as is. Remote failures become warnings, except for a disk that can
be neither viewed nor deleted, which is taken as absent. Nothing is retried.
"""

from enum import StrEnum

from loguru import logger
from pydantic import BaseModel, Field

from image_pipeline.exceptions import RemoteCommandError

from .client import OxideClient
from .models import DiskState


class ReconcileStatus(StrEnum):
    OK = "ok"
    WARN = "warn"


class ReconcileResult(BaseModel):
    """Outcome of one ``make_deletable`` call."""

    model_config = {"use_enum_values": True}

    disk: str
    initial_state: DiskState | None = None
    final_state: DiskState | None = None
    deleted: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def status(self) -> ReconcileStatus:
        return ReconcileStatus.WARN if self.warnings else ReconcileStatus.OK


class DiskReconciler:
    """Applies the stop/finalize transitions, then deletes the disk."""

    def __init__(self, client: OxideClient):
        self.client = client

    def make_deletable(self, disk: str) -> ReconcileResult:
        """Unblock and delete ``disk``.

        Args:
            disk: Disk name

        Returns:
            ReconcileResult: states seen, whether the delete succeeded, warnings
        """
        result = ReconcileResult(disk=disk)
        state = self._read_state(disk)
        result.initial_state = state

        if state == DiskState.IMPORTING_FROM_BULK_WRITES:
            logger.info("Stopping bulk-write import for '{}'", disk)
            try:
                self.client.stop_import(disk)
            except RemoteCommandError as e:
                self._warn(result, f"Import stop failed for disk '{disk}' (will try delete anyway): {e.stderr or e}")
                result.final_state = state
                return self._delete(result)
            # The stop call moves the disk to import_ready; no re-query
            state = DiskState.IMPORT_READY

        if state == DiskState.IMPORT_READY:
            logger.info("Finalizing '{}' (no snapshot) to make it deletable", disk)
            try:
                self.client.finalize_import(disk)
                state = DiskState.DETACHED
            except RemoteCommandError as e:
                self._warn(result, f"Finalize failed for disk '{disk}' (will try delete anyway): {e.stderr or e}")

        result.final_state = state
        return self._delete(result)

    def _read_state(self, disk: str) -> DiskState | None:
        """Current disk state, or None when it cannot be read."""
        try:
            return self.client.get_disk_state(disk)
        except RemoteCommandError as e:
            logger.debug("Could not read state of disk '{}': {}", disk, e)
            return None

    def _delete(self, result: ReconcileResult) -> ReconcileResult:
        try:
            self.client.delete("disk", result.disk)
        except RemoteCommandError as e:
            logger.debug("Delete of disk '{}' failed: {}", result.disk, e)
            if result.initial_state is None:
                # Neither view nor delete found it
                logger.info("Disk '{}' not found, nothing to delete", result.disk)
            else:
                self._warn(result, f"Disk '{result.disk}' already gone")
            return result

        result.deleted = True
        logger.info("Deleted disk '{}'", result.disk)
        return result

    @staticmethod
    def _warn(result: ReconcileResult, message: str) -> None:
        logger.warning(message)
        result.warnings.append(message)
