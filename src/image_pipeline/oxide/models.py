"""Typed views over the remote platform CLI's JSON output.

The CLI reports lifecycle states as free-form strings. They are parsed into
closed enums here; anything unrecognised becomes ``UNKNOWN`` rather than an
empty string, so callers always branch on a real value.
"""

from enum import StrEnum
from typing import Any

import arrow
from pydantic import BaseModel, field_validator

from image_pipeline.constants import KNOWN_VERSIONS, RESOURCE_PREFIX


class DiskState(StrEnum):
    """Disk lifecycle states relevant to deletion."""

    IMPORTING_FROM_BULK_WRITES = "importing_from_bulk_writes"
    IMPORT_READY = "import_ready"
    IMPORTING_FROM_URL = "importing_from_url"
    FINALIZING = "finalizing"
    CREATING = "creating"
    DETACHED = "detached"
    ATTACHING = "attaching"
    ATTACHED = "attached"
    DETACHING = "detaching"
    MAINTENANCE = "maintenance"
    DESTROYED = "destroyed"
    FAULTED = "faulted"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "DiskState":
        """Parse a state given as a string or as an object with a nested ``state``."""
        if isinstance(value, dict):
            value = value.get("state")
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class InstanceState(StrEnum):
    """Instance run states."""

    CREATING = "creating"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    REBOOTING = "rebooting"
    MIGRATING = "migrating"
    REPAIRING = "repairing"
    FAILED = "failed"
    DESTROYED = "destroyed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "InstanceState":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """Non-running states the instance will not leave on its own."""
        return self in (InstanceState.STOPPED, InstanceState.FAILED)


class DiskView(BaseModel):
    """The parts of ``disk view`` output the reconciler needs."""

    model_config = {"extra": "ignore"}

    name: str
    state: DiskState = DiskState.UNKNOWN

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, v: Any) -> DiskState:
        return DiskState.parse(v)


class InstanceView(BaseModel):
    """The parts of ``instance view`` output the pipeline needs."""

    model_config = {"extra": "ignore"}

    name: str
    run_state: InstanceState = InstanceState.UNKNOWN

    @field_validator("run_state", mode="before")
    @classmethod
    def parse_run_state(cls, v: Any) -> InstanceState:
        return InstanceState.parse(v)


class ResourceNames(BaseModel):
    """Names of the remote resources one work item owns."""

    version: str
    datestamp: str
    disk: str
    snapshot: str
    image: str
    instance: str
    serial_log: str

    @classmethod
    def for_version(cls, version: str, datestamp: str | None = None, image: str | None = None) -> "ResourceNames":
        """Derive resource names as ``win-server-<version>-<YYYYMMDD>[-snap|-test]``.

        Args:
            version: Target version, e.g. ``2022``
            datestamp: ``YYYYMMDD``; today (UTC) if omitted
            image: Existing image name to use instead of the derived one
        """
        datestamp = datestamp or arrow.utcnow().format("YYYYMMDD")
        base = f"{RESOURCE_PREFIX}-{version}-{datestamp}"
        return cls(
            version=version,
            datestamp=datestamp,
            disk=base,
            snapshot=f"{base}-snap",
            image=image or base,
            instance=f"{base}-test",
            serial_log=f"{base}-serial.log",
        )


class ExternalIp(BaseModel):
    model_config = {"extra": "ignore"}

    ip: str
    kind: str | None = None


def extract_version(iso_name: str) -> str | None:
    """Return the first known version found in an ISO file name, newest first."""
    return next((version for version in KNOWN_VERSIONS if version in iso_name), None)
