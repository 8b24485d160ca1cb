"""Partition table checks: GPT integrity, layout order and shrink bound.

These checks need no mount. The table is read once per validation with
``sgdisk -p`` and cached on the context.
"""

from loguru import logger

from image_pipeline.constants import OS_PARTITION_CODE, PARTITION_LAYOUT
from image_pipeline.exceptions import CommandError
from image_pipeline.system import PartitionTable, parse_sgdisk_table
from image_pipeline.validation import CheckRecord, ImageCheck, ValidationContext

_MIB = 1024 * 1024


def load_partition_table(context: ValidationContext) -> PartitionTable:
    """Read and cache the partition table; an unreadable table is empty."""
    if context.partition_table is None:
        try:
            output = context.tools.print_table(context.loop_device)
        except CommandError as e:
            logger.warning("Could not read partition table: {}", e)
            output = ""
        context.partition_table = parse_sgdisk_table(output)
    return context.partition_table


class GptIntegrityCheck(ImageCheck):
    """``sgdisk -v`` reports no problems."""

    def __init__(self, name: str = "gpt_integrity"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.tools.verify_table(context.loop_device):
            return [self.passed("GPT is valid (sgdisk -v)")]
        return [self.failed("GPT validation failed, sgdisk -v reported errors")]


class PartitionLayoutCheck(ImageCheck):
    """Exactly four partitions, in Recovery, ESP, MSR, OS data order.

    The last partition is asserted separately: a trailing Recovery partition
    is what a mis-ordered shrink leaves behind.
    """

    def __init__(self, name: str = "partition_layout"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        return self.evaluate(load_partition_table(context))

    def evaluate(self, table: PartitionTable) -> list[CheckRecord]:
        expected_count = len(PARTITION_LAYOUT)
        codes = table.type_codes
        records = []

        if table.count == expected_count:
            records.append(self.passed(f"Partition count: {expected_count}"))
        else:
            records.append(
                self.failed(
                    f"Partition count: {table.count} (expected {expected_count}; "
                    "trailing recovery partition may not have been deleted)"
                )
            )

        if table.count == expected_count:
            mismatches = [
                self.failed(f"Partition {index} type '{code}' (expected {expected_code} {expected_name})")
                for index, (code, (expected_code, expected_name)) in enumerate(zip(codes, PARTITION_LAYOUT), start=1)
                if code != expected_code
            ]
            if mismatches:
                records.extend(mismatches)
            else:
                layout = ", ".join(f"{code} ({name})" for code, name in PARTITION_LAYOUT)
                records.append(self.passed(f"Partition types in order: {layout}"))
        else:
            records.append(self.warning(f"Cannot verify partition type order (unexpected partition count: {table.count})"))

        last_code = codes[-1] if codes else "?"
        if last_code == OS_PARTITION_CODE:
            records.append(self.passed(f"Last partition is OS data ({OS_PARTITION_CODE}), not a trailing recovery partition"))
        else:
            records.append(
                self.failed(
                    f"Last partition type is '{last_code}', expected {OS_PARTITION_CODE}; "
                    "trailing recovery partition may not have been removed"
                )
            )
        return records


class ShrinkCheck(ImageCheck):
    """The image file ends right after the last partition and the backup GPT."""

    def __init__(self, name: str = "shrink"):
        super().__init__(name)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        image_size = context.image_size
        if image_size is None:
            image_size = context.image_path.stat().st_size
        return self.evaluate(image_size, load_partition_table(context))

    def evaluate(self, image_size: int, table: PartitionTable) -> list[CheckRecord]:
        limit = table.shrink_limit()
        if limit is None:
            return [
                self.warning(
                    f"Could not determine shrink limit (last_end={table.last_end}, "
                    f"sector_size={table.sector_size}), skipping size check"
                )
            ]

        sizes = f"Image size ({image_size // _MIB} MiB)"
        bound = f"shrink limit ({limit // _MIB} MiB)"
        if image_size <= limit:
            return [self.passed(f"{sizes} <= {bound}")]
        return [self.failed(f"{sizes} > {bound}, image may not have been shrunk")]
