"""OS partition checks.

The OS partition is mounted read-only through ntfs-3g. If the partition node
is missing or the mount fails, one failure is recorded and the rest of the
section is skipped. Every content check looks at paths relative to the mount
root, so the records never mention the mount point.
"""

import os
from abc import abstractmethod
from pathlib import Path

from image_pipeline.constants import (
    CLOUD_INIT_AGENT,
    DRIVER_STORE,
    LEFTOVER_UNATTEND,
    NTFS_TOOL,
    OS_PARTITION_NUMBER,
    REGISTRY_HIVE_DIR,
    REGISTRY_HIVES,
    SSHD_LOCATIONS,
    SYSPREP_TAG,
)
from image_pipeline.validation import CheckRecord, ImageCheck, ValidationContext

OS_MOUNT_NAME = "os"


class OsPartitionMountCheck(ImageCheck):
    """Mount the OS partition read-only; stops the section on failure."""

    def __init__(self, name: str = "os_partition_mount"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.loop_device is None:
            return [self.stop_section("No loop device, cannot proceed with filesystem checks")]

        tools = context.tools
        node = tools.partition_node(context.loop_device, OS_PARTITION_NUMBER)
        if not tools.node_exists(node):
            return [
                self.stop_section(
                    f"OS partition device (partition {OS_PARTITION_NUMBER}) does not exist, "
                    "cannot proceed with filesystem checks"
                )
            ]

        mount_dir = context.ensure_workspace() / OS_MOUNT_NAME
        if not tools.mount_readonly(node, mount_dir, NTFS_TOOL):
            return [
                self.stop_section(
                    f"Could not mount OS partition (partition {OS_PARTITION_NUMBER}) as NTFS read-only, "
                    "filesystem may be corrupt or incomplete"
                )
            ]

        context.on_close(tools.unmount, mount_dir)
        context.os_root = mount_dir
        return [self.passed("OS partition mounted read-only")]


class OsFilesystemCheck(ImageCheck):
    """Base class for checks that inspect the mounted OS partition."""

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.os_root is None:
            return [self.failed("OS partition is not mounted")]
        return self.inspect(context.os_root)

    @abstractmethod
    def inspect(self, root: Path) -> list[CheckRecord]:
        """Inspect the filesystem mounted at ``root``."""


class SysprepCompletionCheck(OsFilesystemCheck):
    def __init__(self, name: str = "sysprep_completion"):
        super().__init__(name)

    def inspect(self, root: Path) -> list[CheckRecord]:
        if (root / SYSPREP_TAG).is_file():
            return [self.passed("Sysprep completed (sysprep_succeeded.tag present)")]
        return [self.failed("sysprep_succeeded.tag not found, sysprep may not have completed")]


class RegistryHiveCheck(OsFilesystemCheck):
    """The SYSTEM and SOFTWARE hives exist, i.e. the installation is intact."""

    def __init__(self, hives: tuple[str, ...] = REGISTRY_HIVES, name: str = "registry_hives"):
        super().__init__(name)
        self.hives = hives

    def inspect(self, root: Path) -> list[CheckRecord]:
        records = []
        for hive in self.hives:
            relative = f"{REGISTRY_HIVE_DIR}/{hive}"
            if (root / relative).is_file():
                records.append(self.passed(f"Registry hive present: {relative}"))
            else:
                records.append(self.failed(f"Registry hive missing: {relative}"))
        return records


class DriverStoreCheck(OsFilesystemCheck):
    """The driver store holds at least one staged package."""

    def __init__(self, name: str = "driver_store"):
        super().__init__(name)

    def inspect(self, root: Path) -> list[CheckRecord]:
        store = root / DRIVER_STORE
        if not store.is_dir():
            return [self.failed("DriverStore/FileRepository not found, Windows installation may be incomplete")]

        packages = sum(1 for entry in store.iterdir() if entry.is_dir())
        if packages > 0:
            return [self.passed(f"DriverStore/FileRepository: {packages} driver package(s) staged")]
        return [self.failed("DriverStore/FileRepository exists but is empty, driver injection may have failed")]


class LeftoverUnattendCheck(OsFilesystemCheck):
    """Sysprep consumes the answer file; a leftover one is only a warning."""

    def __init__(self, name: str = "leftover_unattend"):
        super().__init__(name)

    def inspect(self, root: Path) -> list[CheckRecord]:
        if (root / LEFTOVER_UNATTEND).is_file():
            return [self.warning(f"{LEFTOVER_UNATTEND} is still present, sysprep may not have fully processed it")]
        return [self.passed(f"No leftover {LEFTOVER_UNATTEND} (expected after successful sysprep)")]


class DriverPackageCheck(OsFilesystemCheck):
    """A driver descriptor is staged somewhere under the driver store."""

    def __init__(self, inf_name: str, label: str, consequence: str, name: str | None = None):
        """Initialize the check.

        Args:
            inf_name: Descriptor file name, matched case-insensitively
            label: Driver label used in records, e.g. ``NetKVM (virtio-net)``
            consequence: What breaks on the platform when the driver is missing
            name: Name of this check (defaults to ``driver_<inf stem>``)
        """
        super().__init__(name or f"driver_{Path(inf_name).stem.lower()}")
        self.inf_name = inf_name
        self.label = label
        self.consequence = consequence

    def inspect(self, root: Path) -> list[CheckRecord]:
        match = find_first_case_insensitive(root / DRIVER_STORE, self.inf_name)
        if match is not None:
            return [self.passed(f"{self.label} driver staged: {match.parent.name}")]
        return [self.failed(f"{self.label} driver not found in DriverStore, {self.consequence}")]


class CloudInitAgentCheck(OsFilesystemCheck):
    def __init__(self, name: str = "cloud_init_agent"):
        super().__init__(name)

    def inspect(self, root: Path) -> list[CheckRecord]:
        if (root / CLOUD_INIT_AGENT).is_file():
            return [self.passed("cloudbase-init is installed")]
        return [
            self.failed("cloudbase-init not found, provisioning (hostname, SSH keys, disk extension) will not work")
        ]


class SshServerCheck(OsFilesystemCheck):
    """sshd.exe is present, inbox or installed."""

    def __init__(self, locations: tuple[str, ...] = SSHD_LOCATIONS, name: str = "ssh_server"):
        super().__init__(name)
        self.locations = locations

    def inspect(self, root: Path) -> list[CheckRecord]:
        if any((root / location).is_file() for location in self.locations):
            return [self.passed("SSH server (sshd.exe) is present")]
        return [self.failed("sshd.exe not found, no remote access possible (no graphical console)")]


def find_first_case_insensitive(top: Path, file_name: str) -> Path | None:
    """Return the first file under ``top`` named ``file_name`` ignoring case.

    Directories are walked in sorted order so the match is stable between runs.
    """
    wanted = file_name.lower()
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames.sort()
        for candidate in sorted(filenames):
            if candidate.lower() == wanted:
                return Path(dirpath) / candidate
    return None
