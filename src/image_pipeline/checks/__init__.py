"""Image checks and the factory for the default image validator."""

from image_pipeline.commands import CommandRunner
from image_pipeline.settings import Settings
from image_pipeline.system import BlockDeviceTools, HiveReader
from image_pipeline.validation import ImageValidator, ImageValidatorBuilder

from .pipeline_builders import (
    add_boot_config_section,
    add_filesystem_section,
    add_partition_table_section,
    add_setup_section,
    add_tools_section,
    add_workspace_section,
)


def build_image_validator(settings: Settings, runner: CommandRunner | None = None) -> ImageValidator:
    """Create the validator with every section, in execution order.

    Args:
        settings: Pipeline settings (sudo usage, workspace parent directory)
        runner: Command runner to use; one is created from settings if omitted

    Returns:
        ImageValidator: ready to ``validate(image_path)``
    """
    runner = runner or CommandRunner(use_sudo=settings.use_sudo)
    builder = ImageValidatorBuilder()

    add_setup_section(builder)
    add_tools_section(builder, use_sudo=runner.use_sudo)
    add_workspace_section(builder)
    add_partition_table_section(builder)
    add_filesystem_section(builder)
    add_boot_config_section(builder)

    return builder.build(BlockDeviceTools(runner), HiveReader(runner), settings.validate_tmp_dir)


__all__ = [
    "build_image_validator",
]
