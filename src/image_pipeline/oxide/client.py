"""Typed client over the ``oxide`` command line tool.

Every call goes through ``CommandRunner`` and parses the CLI's JSON output.
Failures (non-zero exit, unparseable output) raise ``RemoteCommandError``;
callers classify them as warnings, retries or failures.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from image_pipeline.commands import CommandResult, CommandRunner
from image_pipeline.constants import DISK_BLOCK_SIZE
from image_pipeline.exceptions import CommandError, RemoteCommandError

from .models import DiskState, DiskView, ExternalIp, InstanceState, InstanceView, ResourceNames


class OxideClient:
    """Project-scoped wrapper around the remote platform CLI."""

    def __init__(self, runner: CommandRunner, project: str, profile: str | None = None, binary: str = "oxide"):
        """Initialize the client.

        Args:
            runner: Command runner used for every CLI call
            project: Project holding the resources
            profile: Optional CLI profile (``--profile``)
            binary: CLI executable name or path
        """
        self.runner = runner
        self.project = project
        self.profile = profile
        self.binary = binary

    def _argv(self, *args: str) -> list[str]:
        base = [self.binary]
        if self.profile:
            base += ["--profile", self.profile]
        return [*base, *args, "--project", self.project]

    def _run(self, *args: str, capture: bool = True) -> CommandResult:
        argv = self._argv(*args)
        try:
            result = self.runner.run(argv, capture=capture)
        except CommandError as e:
            # The CLI could not be started at all
            raise RemoteCommandError(e.command, e.returncode, e.stderr) from e
        if not result.ok:
            raise RemoteCommandError(argv, result.returncode, result.stderr)
        return result

    def _json(self, *args: str) -> Any:
        result = self._run(*args)
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RemoteCommandError(result.args, result.returncode, f"unparseable JSON output: {e}") from e

    def available(self) -> bool:
        return self.runner.which(self.binary) is not None

    def check_access(self) -> bool:
        """Probe the project; False when unauthenticated or unreachable."""
        try:
            self._run("disk", "list")
        except RemoteCommandError as e:
            logger.debug("Project probe failed: {}", e)
            return False
        return True

    # Listing and deletion

    def list_names(self, kind: str) -> list[str]:
        """Names of every resource of ``kind`` in the project."""
        items = self._json(kind, "list")
        if not isinstance(items, list):
            raise RemoteCommandError(self._argv(kind, "list"), 0, "expected a JSON array")
        return [item["name"] for item in items if isinstance(item, dict) and "name" in item]

    def delete(self, kind: str, name: str) -> None:
        self._run(kind, "delete", f"--{kind}", name)

    # Disks

    def view_disk(self, disk: str) -> DiskView:
        data = self._json("disk", "view", "--disk", disk)
        try:
            return DiskView.model_validate(data)
        except ValidationError as e:
            raise RemoteCommandError(self._argv("disk", "view", "--disk", disk), 0, str(e)) from e

    def get_disk_state(self, disk: str) -> DiskState:
        return self.view_disk(disk).state

    def stop_import(self, disk: str) -> None:
        self._run("disk", "import", "stop", "--disk", disk)

    def finalize_import(self, disk: str) -> None:
        """Finalize an import without taking a snapshot."""
        self._run("disk", "import", "finalize", "--disk", disk)

    def import_disk(self, image_path: Path, names: ResourceNames) -> None:
        """Upload ``image_path`` as a disk, then snapshot it and publish an image.

        Progress output goes straight to the terminal.
        """
        self._run(
            "disk", "import",
            "--path", str(image_path),
            "--disk", names.disk,
            "--disk-block-size", str(DISK_BLOCK_SIZE),
            "--description", f"Windows Server {names.version} built {names.datestamp}",
            "--snapshot", names.snapshot,
            "--image", names.image,
            "--image-description", f"Windows Server {names.version} ({names.datestamp})",
            "--image-os", "windows",
            "--image-version", names.version,
            capture=False,
        )  # fmt: skip

    # Instances

    def create_instance(
        self,
        names: ResourceNames,
        hostname: str | None = None,
        disk_size: str = "80GiB",
        memory: str = "8GiB",
        ncpus: int = 2,
    ) -> None:
        """Create and start an instance booting from ``names.image``."""
        self._run(
            "instance", "from-image",
            "--name", names.instance,
            "--hostname", hostname or names.instance,
            "--image", names.image,
            "--size", disk_size,
            "--memory", memory,
            "--ncpus", str(ncpus),
            "--description", f"Boot test for {names.image}",
            "--start",
        )  # fmt: skip

    def view_instance(self, instance: str) -> dict[str, Any]:
        """Raw ``instance view`` JSON object."""
        data = self._json("instance", "view", "--instance", instance)
        if not isinstance(data, dict):
            raise RemoteCommandError(self._argv("instance", "view", "--instance", instance), 0, "expected a JSON object")
        return data

    def get_instance_state(self, instance: str) -> InstanceState:
        data = self.view_instance(instance)
        return InstanceView.model_validate({"name": data.get("name", instance), "run_state": data.get("run_state")}).run_state

    def stop_instance(self, instance: str) -> None:
        self._run("instance", "stop", "--instance", instance)

    def serial_history(self, instance: str) -> bytes:
        """Full console transcript since the instance started."""
        data = self._json("instance", "serial", "history", "--instance", instance, "--json")
        try:
            return bytes(data["data"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteCommandError(
                self._argv("instance", "serial", "history", "--instance", instance), 0, f"no transcript data: {e}"
            ) from e

    def external_ips(self, instance: str) -> list[ExternalIp]:
        data = self._json("instance", "external-ip", "list", "--instance", instance)
        if not isinstance(data, list):
            return []
        return [ExternalIp.model_validate(item) for item in data if isinstance(item, dict) and "ip" in item]
