"""Interfaces of the stage collaborators the regression pipeline drives.

Each delegate returns an exit code (0 = success) so the pipeline only deals
in Pass/Fail, whatever the collaborator does internally.
"""

from pathlib import Path
from typing import Protocol

from image_pipeline.oxide.models import ResourceNames

from .models import WorkItem


class BuildDelegate(Protocol):
    def build(self, item: WorkItem) -> int: ...


class ValidateDelegate(Protocol):
    def validate(self, image_path: Path) -> int: ...


class RemoteTestDelegate(Protocol):
    def plan_resources(self, item: WorkItem) -> ResourceNames: ...

    def remote_test(self, item: WorkItem) -> int: ...


class CleanupDelegate(Protocol):
    def cleanup(self, resources: ResourceNames) -> bool:
        """Remove ``resources``; False when anything may remain."""
        ...
