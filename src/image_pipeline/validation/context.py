"""Per-run state shared by the checks of one validation.

The context owns every resource a validation acquires: the private workspace
with the sparse copy, the loop device and the mount points. Checks register
release callbacks on it and the validator closes it on every exit path, so
resources are released in reverse order of acquisition (unmount, detach,
remove the copy).
"""

import tempfile
from contextlib import ExitStack
from pathlib import Path

from image_pipeline.system import BlockDeviceTools, HiveReader, PartitionTable


class ValidationContext:
    """Resources and intermediate facts for one validation run."""

    def __init__(
        self,
        image_path: Path,
        tools: BlockDeviceTools,
        hive_reader: HiveReader,
        tmp_root: Path | None = None,
    ):
        """Initialize the context.

        Args:
            image_path: The image under validation; never modified
            tools: Block-device tool wrapper
            hive_reader: Registry hive reader for the boot configuration checks
            tmp_root: Parent directory for the private workspace
        """
        self.image_path = image_path
        self.tools = tools
        self.hive_reader = hive_reader
        self.tmp_root = tmp_root

        self.image_size: int | None = None
        self.workspace: Path | None = None
        self.copy_path: Path | None = None
        self.loop_device: str | None = None
        self.partition_table: PartitionTable | None = None
        self.os_root: Path | None = None
        self.efi_root: Path | None = None

        self._stack = ExitStack()

    def __enter__(self) -> "ValidationContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release every registered resource."""
        self._stack.close()

    def on_close(self, callback, *args) -> None:
        """Register a release callback, run in LIFO order on close."""
        self._stack.callback(callback, *args)

    def ensure_workspace(self) -> Path:
        """Create the private workspace directory on first use."""
        if self.workspace is None:
            tmp = tempfile.TemporaryDirectory(
                prefix="image-validate-",
                dir=self.tmp_root,
                ignore_cleanup_errors=True,
            )
            self.workspace = Path(self._stack.enter_context(tmp))
        return self.workspace
