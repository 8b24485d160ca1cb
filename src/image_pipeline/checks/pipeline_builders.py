"""Reusable section builders for the image validator.

Each function adds one section, in the order the validator runs them:
setup, tools, workspace, partition table, OS filesystem, boot configuration.
"""

from image_pipeline.constants import (
    NETWORK_DRIVER_INF,
    REQUIRED_TOOLS,
    SECTION_BOOT_CONFIG,
    SECTION_FILESYSTEM,
    SECTION_PARTITION_TABLE,
    SECTION_SETUP,
    SECTION_TOOLS,
    SECTION_WORKSPACE,
    STORAGE_DRIVER_INF,
)
from image_pipeline.validation import ImageValidatorBuilder

from .boot_config import BcdStoreCheck, EfiPartitionMountCheck, SerialConsoleCheck
from .filesystem import (
    CloudInitAgentCheck,
    DriverPackageCheck,
    DriverStoreCheck,
    LeftoverUnattendCheck,
    OsPartitionMountCheck,
    RegistryHiveCheck,
    SshServerCheck,
    SysprepCompletionCheck,
)
from .partition_table import GptIntegrityCheck, PartitionLayoutCheck, ShrinkCheck
from .setup import ImagePresenceCheck, ToolAvailabilityCheck
from .workspace import LoopAttachCheck, SparseCopyCheck


def add_setup_section(builder: ImageValidatorBuilder) -> ImageValidatorBuilder:
    builder.add_section(SECTION_SETUP, "0. Setup").add_check(ImagePresenceCheck())
    return builder


def add_tools_section(builder: ImageValidatorBuilder, use_sudo: bool = False) -> ImageValidatorBuilder:
    """Add the tool availability section.

    Args:
        builder: Validator builder to add the section to
        use_sudo: Also require ``sudo`` for the privileged block-device commands

    Returns:
        Builder with the tools section added (for chaining)
    """
    required = (*REQUIRED_TOOLS, "sudo") if use_sudo else REQUIRED_TOOLS
    builder.add_section(SECTION_TOOLS, "1. Tool checks").add_check(ToolAvailabilityCheck(required))
    return builder


def add_workspace_section(builder: ImageValidatorBuilder) -> ImageValidatorBuilder:
    (
        builder.add_section(SECTION_WORKSPACE, "2. Preparing image copy and loop device")
        .add_check(SparseCopyCheck())
        .add_check(LoopAttachCheck())
    )
    return builder


def add_partition_table_section(builder: ImageValidatorBuilder) -> ImageValidatorBuilder:
    (
        builder.add_section(SECTION_PARTITION_TABLE, "3. Structural checks")
        .add_check(GptIntegrityCheck())
        .add_check(PartitionLayoutCheck())
        .add_check(ShrinkCheck())
    )
    return builder


def add_filesystem_section(builder: ImageValidatorBuilder) -> ImageValidatorBuilder:
    """Add the OS filesystem section.

    Includes:
    - Read-only NTFS mount of the OS partition (stops the section on failure)
    - Sysprep marker, registry hives, driver store, leftover answer file
    - VirtIO network and storage drivers, cloudbase-init, sshd
    """
    (
        builder.add_section(SECTION_FILESYSTEM, "4. Filesystem checks")
        .add_check(OsPartitionMountCheck())
        .add_check(SysprepCompletionCheck())
        .add_check(RegistryHiveCheck())
        .add_check(DriverStoreCheck())
        .add_check(LeftoverUnattendCheck())
        .add_check(
            DriverPackageCheck(
                NETWORK_DRIVER_INF,
                "NetKVM (virtio-net)",
                "networking will fail on the rack",
            )
        )
        .add_check(
            DriverPackageCheck(
                STORAGE_DRIVER_INF,
                "viostor (virtio-blk)",
                "the cloud-init metadata drive will be inaccessible",
            )
        )
        .add_check(CloudInitAgentCheck())
        .add_check(SshServerCheck())
    )
    return builder


def add_boot_config_section(builder: ImageValidatorBuilder) -> ImageValidatorBuilder:
    (
        builder.add_section(SECTION_BOOT_CONFIG, "5. EFI partition checks (BCD / serial console)")
        .add_check(EfiPartitionMountCheck())
        .add_check(BcdStoreCheck())
        .add_check(SerialConsoleCheck())
    )
    return builder
