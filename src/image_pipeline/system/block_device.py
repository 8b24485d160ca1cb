"""Block-layer operations used by the image validator."""

from pathlib import Path

from loguru import logger

from image_pipeline.commands import CommandRunner
from image_pipeline.exceptions import CommandError


class BlockDeviceTools:
    """Thin wrapper over ``cp``, ``losetup``, ``sgdisk`` and ``mount``.

    Privileged commands go through the runner's sudo handling.
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def sparse_copy(self, source: Path, destination: Path) -> None:
        self.runner.run(["cp", "--sparse=always", str(source), str(destination)], check=True)

    def attach_readonly(self, image: Path) -> str:
        """Attach ``image`` as a read-only loop device with partition scanning.

        Returns:
            str: the loop device path, e.g. ``/dev/loop3``

        Raises:
            CommandError: If losetup fails or prints no device
        """
        args = ["losetup", "-Pr", "--find", "--show", str(image)]
        result = self.runner.run(args, privileged=True, check=True)
        device = result.stdout.strip()
        if not device:
            raise CommandError(args, result.returncode, "losetup printed no device")
        return device

    def detach(self, device: str) -> None:
        result = self.runner.run(["losetup", "-d", device], privileged=True)
        if not result.ok:
            logger.warning("Could not detach loop device {}: {}", device, result.stderr.strip())

    def verify_table(self, device: str) -> bool:
        return self.runner.run(["sgdisk", "-v", device], privileged=True).ok

    def print_table(self, device: str) -> str:
        return self.runner.run(["sgdisk", "-p", device], privileged=True, check=True).stdout

    @staticmethod
    def partition_node(device: str, number: int) -> str:
        return f"{device}p{number}"

    @staticmethod
    def node_exists(node: str) -> bool:
        return Path(node).is_block_device()

    def mount_readonly(self, node: str, mount_dir: Path, fstype: str) -> bool:
        mount_dir.mkdir(parents=True, exist_ok=True)
        result = self.runner.run(["mount", "-t", fstype, "-o", "ro", node, str(mount_dir)], privileged=True)
        if not result.ok:
            logger.debug("mount {} failed: {}", node, result.stderr.strip())
        return result.ok

    def unmount(self, mount_dir: Path) -> None:
        result = self.runner.run(["umount", str(mount_dir)], privileged=True)
        if not result.ok:
            logger.warning("Could not unmount {}: {}", mount_dir, result.stderr.strip())
