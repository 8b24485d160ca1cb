"""Application configuration using Pydantic Settings.

This module centralizes runtime configuration for the image pipeline. Values
can be provided via environment variables (preferred) or fall back to the
defaults below. A ``Settings`` instance is intended to be retrieved via
``get_settings`` which caches the object for reuse across the process.

Environment variable prefix: ``IMAGE_PIPELINE_`` (e.g. ``IMAGE_PIPELINE_OXIDE_PROJECT``).
"""

import shlex
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime pipeline settings.

    Attributes map directly to environment variables using the ``IMAGE_PIPELINE_``
    prefix (case-insensitive). For example, ``versions`` <- ``IMAGE_PIPELINE_VERSIONS``.
    """

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Application log level",
    )

    # Regression inputs
    versions: str = Field(
        default="2022 2025",
        description="Space or comma separated list of target versions",
    )  # fmt: skip
    iso_dir: Path = Field(
        default=Path("isos"),
        description="Directory holding windows-server-<version>-eval.iso files",
    )  # fmt: skip
    output_dir: Path = Field(
        default=Path("output"),
        description="Directory receiving windows-server-<version>.raw images",
    )  # fmt: skip

    # Build tool environment
    work_dir: Path = Field(default=Path("work"), description="Scratch directory for the build tool")
    virtio_iso: Path | None = Field(default=None, description="VirtIO driver ISO")
    ovmf_path: Path | None = Field(default=None, description="OVMF firmware image")
    unattend_dir: Path | None = Field(default=None, description="Default unattend directory")
    unattend_overrides: dict[str, Path] = Field(
        default_factory=dict,
        description="Per-version unattend directory overrides (JSON object)",
    )  # fmt: skip
    build_command: str = Field(
        default="bash imgbuild.sh build-image",
        description="Command line that builds one image from the build env file",
    )  # fmt: skip
    build_env_file: Path = Field(
        default=Path("imgbuild.env"),
        description="Environment file written for the build tool before each build",
    )  # fmt: skip

    # Remote platform
    oxide_bin: str = Field(default="oxide", description="Remote platform CLI executable")
    oxide_project: str | None = Field(default=None, description="Project holding test resources")
    oxide_profile: str | None = Field(default=None, description="Optional CLI profile")
    instance_hostname: str | None = Field(default=None, description="Hostname for test instances")
    instance_disk_size: str = Field(default="80GiB", description="Boot disk size for test instances")
    instance_memory: str = Field(default="8GiB", description="Memory for test instances")
    instance_ncpus: int = Field(default=2, description="vCPU count for test instances")
    serial_log_dir: Path = Field(default=Path("."), description="Where serial logs and instance JSON are written")

    # Boot verification budget
    boot_rounds: int = Field(default=40, ge=1, description="Serial console polling rounds")
    boot_interval_s: float = Field(default=15.0, ge=0, description="Seconds between polling rounds")
    state_watch_rounds: int = Field(default=60, ge=1, description="Lifecycle watcher polling rounds")
    state_watch_interval_s: float = Field(default=10.0, ge=0, description="Seconds between watcher polls")

    # Cleanup
    instance_stop_attempts: int = Field(default=24, ge=1, description="Polls while waiting for an instance to stop")
    instance_stop_interval_s: float = Field(default=5.0, ge=0, description="Seconds between stop polls")

    # Validator
    use_sudo: bool = Field(default=True, description="Prefix privileged block-device commands with sudo")
    validate_tmp_dir: Path | None = Field(default=None, description="Parent directory for validation workspaces")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    @property
    def version_list(self) -> list[str]:
        """Configured versions in order, duplicates removed."""
        seen: list[str] = []
        for version in self.versions.replace(",", " ").split():
            if version not in seen:
                seen.append(version)
        return seen

    @property
    def build_argv(self) -> list[str]:
        return shlex.split(self.build_command)

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_PIPELINE_",
        case_sensitive=False,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
