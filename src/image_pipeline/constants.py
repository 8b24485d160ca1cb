"""Global constants for the image pipeline.

This module defines constants used throughout the application to avoid
hardcoded strings and make the codebase more maintainable.
"""

# Validation section names
SECTION_SETUP = "setup"
SECTION_TOOLS = "tools"
SECTION_WORKSPACE = "workspace"
SECTION_PARTITION_TABLE = "partition_table"
SECTION_FILESYSTEM = "filesystem"
SECTION_BOOT_CONFIG = "boot_config"

# GPT layout produced by a successful build, in on-disk order
PARTITION_LAYOUT: tuple[tuple[str, str], ...] = (
    ("2700", "Recovery"),
    ("EF00", "ESP"),
    ("0C01", "MSR"),
    ("0700", "OS data"),
)
OS_PARTITION_CODE = "0700"
ESP_PARTITION_NUMBER = 2
OS_PARTITION_NUMBER = 4

# Backup GPT: 1 header sector + 32 partition array sectors
BACKUP_GPT_SECTORS = 33
DEFAULT_SECTOR_SIZE = 512

# Paths inside the OS partition
SYSPREP_TAG = "Windows/System32/Sysprep/Sysprep_succeeded.tag"
REGISTRY_HIVE_DIR = "Windows/System32/config"
REGISTRY_HIVES = ("SYSTEM", "SOFTWARE")
DRIVER_STORE = "Windows/System32/DriverStore/FileRepository"
LEFTOVER_UNATTEND = "Windows/Panther/unattend.xml"
NETWORK_DRIVER_INF = "netkvm.inf"
STORAGE_DRIVER_INF = "viostor.inf"
CLOUD_INIT_AGENT = "Program Files/Cloudbase Solutions/Cloudbase-Init/Python/Scripts/cloudbase-init.exe"
SSHD_LOCATIONS = (
    "Windows/System32/OpenSSH/sshd.exe",
    "Program Files/OpenSSH/sshd.exe",
)

# Paths inside the EFI system partition
BCD_STORE = "EFI/Microsoft/Boot/BCD"
BCD_OBJECTS_KEY = "\\Objects"
# BcdOSLoaderBoolean_EmsEnabled
BCD_EMS_ELEMENT = "26000020"
BCD_ENABLED_MARKER = "0x01"

# Tools
REQUIRED_TOOLS = ("sgdisk", "losetup", "cp")
NTFS_TOOL = "ntfs-3g"
NTFS_TOOL_FALLBACKS = ("/usr/bin/ntfs-3g", "/sbin/mount.ntfs-3g")
HIVE_TOOL = "hivexget"

# Boot verification markers
BOOT_SUCCESS_MARKER = "CMD command is now available"
BOOT_FAILURE_MARKERS = ("Status: 0xc000", "INACCESSIBLE_BOOT_DEVICE")

# Remote resources
RESOURCE_PREFIX = "win-server"
KNOWN_VERSIONS = ("2025", "2022", "2019", "2016")
DISK_BLOCK_SIZE = 512
