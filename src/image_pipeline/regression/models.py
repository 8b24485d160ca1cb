"""Data models for the regression pipeline."""

from pathlib import Path

import arrow
from pydantic import BaseModel, Field, model_validator

from image_pipeline.oxide.models import ResourceNames

from .enums import VERDICT_STAGES, StageName, StageStatus


class StageResult(BaseModel):
    """Terminal outcome of one stage for one work item.

    ``exit_code`` is None exactly when the stage was skipped.
    """

    model_config = {"use_enum_values": True}

    stage: StageName
    status: StageStatus
    exit_code: int | None = None
    message: str = ""

    @model_validator(mode="after")
    def check_exit_code(self) -> "StageResult":
        if (self.status == StageStatus.SKIP) != (self.exit_code is None):
            raise ValueError("exit_code must be None for skipped stages and set otherwise")
        return self

    @classmethod
    def from_exit_code(cls, stage: StageName, exit_code: int, message: str = "") -> "StageResult":
        status = StageStatus.PASS if exit_code == 0 else StageStatus.FAIL
        return cls(stage=stage, status=status, exit_code=exit_code, message=message)

    @classmethod
    def skipped(cls, stage: StageName, message: str) -> "StageResult":
        return cls(stage=stage, status=StageStatus.SKIP, message=message)


class WorkItem(BaseModel):
    """One target version processed end to end."""

    version: str
    iso_path: Path
    output_image: Path
    resources: ResourceNames | None = None
    results: list[StageResult] = Field(default_factory=list)

    @classmethod
    def for_version(cls, version: str, iso_dir: Path, output_dir: Path) -> "WorkItem":
        """Apply the path conventions for ``version``."""
        return cls(
            version=version,
            iso_path=iso_dir / f"windows-server-{version}-eval.iso",
            output_image=output_dir / f"windows-server-{version}.raw",
        )

    def record(self, result: StageResult) -> StageResult:
        if self.result_for(result.stage) is not None:
            raise ValueError(f"Stage '{result.stage}' already recorded for {self.version}")
        self.results.append(result)
        return result

    def result_for(self, stage: StageName) -> StageResult | None:
        return next((result for result in self.results if result.stage == stage), None)

    def status_for(self, stage: StageName) -> StageStatus | None:
        result = self.result_for(stage)
        return StageStatus(result.status) if result else None

    @property
    def failed(self) -> bool:
        return any(self.status_for(stage) == StageStatus.FAIL for stage in VERDICT_STAGES)


class RunOptions(BaseModel):
    skip_build: bool = False
    skip_remote_test: bool = False
    no_cleanup: bool = False


class RegressionSummary(BaseModel):
    """All work items of one run, with their stage results."""

    items: list[WorkItem] = Field(default_factory=list)
    options: RunOptions = Field(default_factory=RunOptions)
    started_at: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    total_execution_time_ms: float | None = None

    @property
    def passed(self) -> bool:
        return not any(item.failed for item in self.items)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1
