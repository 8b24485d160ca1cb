"""Image build collaborator.

The build tool is opaque: it reads an environment file naming its inputs and
outputs and signals success through its exit code. One env file is written
per version right before that version's build.
"""

from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from image_pipeline.commands import CommandRunner
from image_pipeline.exceptions import CommandError
from image_pipeline.settings import Settings

from .models import WorkItem


class BuildEnvironment(BaseModel):
    """Inputs and output of one image build."""

    version: str
    work_dir: Path
    output_image: Path
    windows_iso: Path
    virtio_iso: Path | None = None
    unattend_dir: Path | None = None
    ovmf_path: Path | None = None

    @classmethod
    def for_item(cls, item: WorkItem, settings: Settings) -> "BuildEnvironment":
        """Apply settings to ``item``; a per-version unattend override wins over the default."""
        return cls(
            version=item.version,
            work_dir=settings.work_dir,
            output_image=item.output_image,
            windows_iso=item.iso_path,
            virtio_iso=settings.virtio_iso,
            unattend_dir=settings.unattend_overrides.get(item.version, settings.unattend_dir),
            ovmf_path=settings.ovmf_path,
        )

    def render(self) -> str:
        values = {
            "WORK_DIR": self.work_dir,
            "OUTPUT_IMAGE": self.output_image,
            "WINDOWS_ISO": self.windows_iso,
            "VIRTIO_ISO": self.virtio_iso,
            "UNATTEND_DIR": self.unattend_dir,
            "OVMF_PATH": self.ovmf_path,
        }
        lines = [f"# Auto-generated by image-pipeline for Windows Server {self.version}"]
        lines += [f"{key}={'' if value is None else value}" for key, value in values.items()]
        return "\n".join(lines) + "\n"


class BuildRunner:
    """Writes the env file and runs the build command for one item."""

    def __init__(self, runner: CommandRunner, settings: Settings):
        self.runner = runner
        self.settings = settings

    def write_env_file(self, item: WorkItem) -> Path:
        env = BuildEnvironment.for_item(item, self.settings)
        env_file = self.settings.build_env_file
        env_file.parent.mkdir(parents=True, exist_ok=True)
        env_file.write_text(env.render())
        logger.info("{} written for {}", env_file.name, item.version)
        for line in env.render().splitlines()[1:]:
            logger.info("    {}", line)
        return env_file

    def build(self, item: WorkItem) -> int:
        self.write_env_file(item)
        logger.info("==> [{}] Building image ...", item.version)
        try:
            result = self.runner.run(self.settings.build_argv, capture=False)
        except CommandError as e:
            logger.error("Build command could not run: {}", e)
            return e.returncode
        return result.returncode
