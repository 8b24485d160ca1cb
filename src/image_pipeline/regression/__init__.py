"""Multi-version regression pipeline: build, validate, remote-test, cleanup."""

from .build import BuildEnvironment, BuildRunner
from .delegates import CleanupAdapter, RemoteTestAdapter, ValidatorDelegate
from .enums import VERDICT_STAGES, StageName, StageStatus
from .models import RegressionSummary, RunOptions, StageResult, WorkItem
from .orchestrator import RegressionPipeline
from .report import build_summary_table, print_summary

__all__ = [
    "BuildEnvironment",
    "BuildRunner",
    "CleanupAdapter",
    "RegressionPipeline",
    "RegressionSummary",
    "RemoteTestAdapter",
    "RunOptions",
    "StageName",
    "StageResult",
    "StageStatus",
    "VERDICT_STAGES",
    "ValidatorDelegate",
    "WorkItem",
    "build_summary_table",
    "print_summary",
]
