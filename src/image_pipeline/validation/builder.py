"""Builder for constructing image validators."""

from pathlib import Path

from image_pipeline.system import BlockDeviceTools, HiveReader

from .section import ValidationSection
from .validator import ImageValidator


class ImageValidatorBuilder:
    """Builder for constructing image validators with a fluent interface."""

    def __init__(self):
        self.sections: list[ValidationSection] = []
        self._sections_by_name: dict[str, ValidationSection] = {}

    def add_section(self, name: str, description: str) -> ValidationSection:
        """Add a new section and return it for chaining.

        Args:
            name: Section name
            description: Section description (printed as the section header)

        Returns:
            The created section for method chaining

        Raises:
            ValueError: If section name already exists
        """
        if name in self._sections_by_name:
            raise ValueError(f"Section '{name}' already exists")

        section = ValidationSection(name, description)
        self.sections.append(section)
        self._sections_by_name[name] = section
        return section

    def get_section(self, name: str) -> ValidationSection | None:
        return self._sections_by_name.get(name)

    def build(self, tools: BlockDeviceTools, hive_reader: HiveReader, tmp_root: Path | None = None) -> ImageValidator:
        """Build the validator.

        Args:
            tools: Block-device tool wrapper shared by the checks
            hive_reader: Registry hive reader for boot configuration checks
            tmp_root: Parent directory for per-run workspaces

        Returns:
            Configured ImageValidator
        """
        return ImageValidator(self.sections, tools, hive_reader, tmp_root)

    def __str__(self) -> str:
        return f"ImageValidatorBuilder(sections={len(self.sections)})"
