"""Local system collaborators: block devices, partition tables and registry hives."""

from .block_device import BlockDeviceTools
from .gpt import PartitionEntry, PartitionTable, parse_sgdisk_table
from .hive import HiveReader

__all__ = [
    "BlockDeviceTools",
    "HiveReader",
    "PartitionEntry",
    "PartitionTable",
    "parse_sgdisk_table",
]
