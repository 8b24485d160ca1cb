"""Setup and tool availability checks."""

import os
from pathlib import Path

from image_pipeline.commands import CommandRunner
from image_pipeline.constants import HIVE_TOOL, NTFS_TOOL, NTFS_TOOL_FALLBACKS, REQUIRED_TOOLS
from image_pipeline.validation import CheckRecord, ImageCheck, ValidationContext

_MIB = 1024 * 1024


class ImagePresenceCheck(ImageCheck):
    """Fatal precondition: the image exists. Records its size."""

    def __init__(self, name: str = "image_presence", is_critical: bool = True):
        super().__init__(name, is_critical)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        image = context.image_path
        if not image.is_file():
            return [self.failed(f"Image not found: {image}")]

        stat = image.stat()
        context.image_size = stat.st_size
        return [
            self.info(f"Image: {image}"),
            self.info(f"Image file size: {stat.st_size // _MIB} MiB"),
            # st_blocks is in 512-byte units regardless of the filesystem block size
            self.info(f"Estimated sparse copy size: {stat.st_blocks * 512 // _MIB} MiB"),
        ]


class ToolAvailabilityCheck(ImageCheck):
    """Required tools fail (and abort); optional tools only warn.

    All tools are reported before the validation aborts, so one run lists
    everything that needs installing.
    """

    def __init__(
        self,
        required_tools: tuple[str, ...] = REQUIRED_TOOLS,
        name: str = "tool_availability",
        is_critical: bool = True,
    ):
        """Initialize the check.

        Args:
            required_tools: Tools whose absence makes validation impossible
            name: Name of this check
            is_critical: Whether a missing required tool aborts the validation
        """
        super().__init__(name, is_critical)
        self.required_tools = required_tools

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        runner = context.tools.runner
        records = []

        for tool in self.required_tools:
            if runner.which(tool):
                records.append(self.passed(f"{tool} is available"))
            else:
                records.append(self.failed(f"{tool} is not available"))

        if ntfs_available(runner):
            records.append(self.passed(f"{NTFS_TOOL} is available"))
        else:
            records.append(self.warning(f"{NTFS_TOOL} not found, filesystem checks may fail (apt install ntfs-3g)"))

        if context.hive_reader.available():
            records.append(self.passed(f"{HIVE_TOOL} is available (EMS/BCD check enabled)"))
        else:
            records.append(self.warning(f"{HIVE_TOOL} not found, EMS check will be skipped (apt install libhivex-bin)"))

        return records


def ntfs_available(runner: CommandRunner) -> bool:
    """ntfs-3g may live outside PATH, so common locations are checked too."""
    if runner.which(NTFS_TOOL):
        return True
    return any(os.access(Path(candidate), os.X_OK) for candidate in NTFS_TOOL_FALLBACKS)
