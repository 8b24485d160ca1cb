"""EFI partition checks: BCD store and serial console (EMS).

Independent of the OS partition checks: the EFI system partition is mounted
separately, read-only, as vfat.
"""

from pathlib import Path

from image_pipeline.constants import (
    BCD_EMS_ELEMENT,
    BCD_ENABLED_MARKER,
    BCD_OBJECTS_KEY,
    BCD_STORE,
    ESP_PARTITION_NUMBER,
    HIVE_TOOL,
)
from image_pipeline.system import HiveReader
from image_pipeline.validation import CheckRecord, ImageCheck, ValidationContext

EFI_MOUNT_NAME = "efi"


class EfiPartitionMountCheck(ImageCheck):
    """Mount the EFI system partition read-only; stops the section on failure."""

    def __init__(self, name: str = "efi_partition_mount"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.loop_device is None:
            return [self.stop_section("No loop device, cannot check the EFI partition")]

        tools = context.tools
        node = tools.partition_node(context.loop_device, ESP_PARTITION_NUMBER)
        mount_dir = context.ensure_workspace() / EFI_MOUNT_NAME
        if not tools.node_exists(node) or not tools.mount_readonly(node, mount_dir, "vfat"):
            return [self.stop_section(f"Could not mount EFI partition (partition {ESP_PARTITION_NUMBER})")]

        context.on_close(tools.unmount, mount_dir)
        context.efi_root = mount_dir
        return [self.passed("EFI partition mounted read-only")]


class BcdStoreCheck(ImageCheck):
    def __init__(self, name: str = "bcd_store"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.efi_root is not None and (context.efi_root / BCD_STORE).is_file():
            return [self.passed(f"BCD store present at {BCD_STORE}")]
        return [self.failed("BCD store not found, boot configuration is missing")]


class SerialConsoleCheck(ImageCheck):
    """EMS is enabled on at least one BCD object.

    Without a BCD store there is nothing to inspect and no record is produced;
    without the hive tool the check degrades to a warning.
    """

    def __init__(self, name: str = "serial_console"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.efi_root is None:
            return []
        bcd = context.efi_root / BCD_STORE
        if not bcd.is_file():
            return []
        return self.evaluate(context.hive_reader, bcd)

    def evaluate(self, hive_reader: HiveReader, bcd: Path) -> list[CheckRecord]:
        if not hive_reader.available():
            return [self.warning(f"Skipping EMS check, {HIVE_TOOL} not available (apt install libhivex-bin)")]

        for object_id in hive_reader.list_object_ids(bcd, BCD_OBJECTS_KEY):
            element = f"{BCD_OBJECTS_KEY}\\{object_id}\\Elements\\{BCD_EMS_ELEMENT}\\Element"
            value = hive_reader.read_value(bcd, element)
            # Boolean true is stored little-endian as 0x01000000
            if value and BCD_ENABLED_MARKER in value:
                return [self.passed("EMS (serial console) is enabled in BCD")]

        return [self.failed("EMS not enabled in BCD, serial console will not work (bcdedit /ems on was not run)")]
