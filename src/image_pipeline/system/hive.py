"""Registry hive access through ``hivexget``."""

import re
from pathlib import Path

from image_pipeline.commands import CommandRunner
from image_pipeline.constants import HIVE_TOOL

_GUID_RE = re.compile(r"\{[^}]+\}")


class HiveReader:
    """Reads keys and values from an offline registry hive.

    The tool is optional; callers check ``available()`` and degrade to a
    warning when it is missing.
    """

    def __init__(self, runner: CommandRunner, tool: str = HIVE_TOOL):
        self.runner = runner
        self.tool = tool

    def available(self) -> bool:
        return self.runner.which(self.tool) is not None

    def list_object_ids(self, hive: Path, key: str) -> list[str]:
        """Return the ``{GUID}`` names printed for ``key``, in output order."""
        result = self.runner.run([self.tool, str(hive), key])
        if not result.ok:
            return []
        return _GUID_RE.findall(result.stdout)

    def read_value(self, hive: Path, path: str) -> str | None:
        """Return the raw value printed for ``path``, or None if unreadable."""
        result = self.runner.run([self.tool, str(hive), path])
        if not result.ok:
            return None
        return result.stdout.strip()
