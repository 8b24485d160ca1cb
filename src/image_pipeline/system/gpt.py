"""Parsing of ``sgdisk -p`` partition table reports.

A report looks like::

    Disk /dev/loop3: 62914560 sectors, 30.0 GiB
    Sector size (logical/physical): 512/512 bytes
    ...
    Number  Start (sector)    End (sector)  Size       Code  Name
       1            2048         1050623   512.0 MiB   2700  Basic data partition
       2         1050624         1255423   100.0 MiB   EF00  EFI system partition

Only lines starting with whitespace followed by two integers are partition
entries. Column 6 holds the type code.
"""

import re

from pydantic import BaseModel, Field

from image_pipeline.constants import BACKUP_GPT_SECTORS, DEFAULT_SECTOR_SIZE

_ENTRY_RE = re.compile(r"^\s+(\d+)\s+(\d+)\s+(\d+)\s+(\S+)\s+(\S+)\s+(\S+)\s*(.*)$")
_SECTOR_SIZE_RE = re.compile(r"Sector size[^:]*:\s*(\d+)")


class PartitionEntry(BaseModel):
    """One partition line of an ``sgdisk -p`` report."""

    number: int
    start: int
    end: int
    size: str
    unit: str
    code: str
    name: str = ""


class PartitionTable(BaseModel):
    """Parsed partition table with the reported sector size."""

    sector_size: int = DEFAULT_SECTOR_SIZE
    entries: list[PartitionEntry] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def type_codes(self) -> list[str]:
        return [entry.code for entry in self.entries]

    @property
    def last_end(self) -> int:
        """Highest end sector across all partitions, 0 for an empty table."""
        return max((entry.end for entry in self.entries), default=0)

    def shrink_limit(self) -> int | None:
        """Largest file size a shrunk image may have, in bytes.

        The image ends right after the last partition plus room for the
        backup GPT header and partition array.
        """
        if self.last_end <= 0 or self.sector_size <= 0:
            return None
        return (self.last_end + 1 + BACKUP_GPT_SECTORS) * self.sector_size


def parse_sgdisk_table(output: str) -> PartitionTable:
    """Parse ``sgdisk -p`` output into a ``PartitionTable``.

    Type codes are upper-cased. A missing sector size annotation falls back
    to 512 bytes.

    Args:
        output: Raw text printed by ``sgdisk -p``

    Returns:
        PartitionTable: entries in report order
    """
    sector_size = DEFAULT_SECTOR_SIZE
    entries: list[PartitionEntry] = []

    for line in output.splitlines():
        size_match = _SECTOR_SIZE_RE.search(line)
        if size_match:
            sector_size = int(size_match.group(1))
            continue

        entry_match = _ENTRY_RE.match(line)
        if not entry_match:
            continue
        number, start, end, size, unit, code, name = entry_match.groups()
        entries.append(
            PartitionEntry(
                number=int(number),
                start=int(start),
                end=int(end),
                size=size,
                unit=unit,
                code=code.upper(),
                name=name.strip(),
            )
        )

    return PartitionTable(sector_size=sector_size, entries=entries)
