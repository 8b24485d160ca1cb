"""Enums for the regression pipeline."""

from enum import StrEnum


class StageName(StrEnum):
    """Per-item stages, in execution order."""

    BUILD = "build"
    VALIDATE = "validate"
    REMOTE_TEST = "remote_test"
    CLEANUP = "cleanup"


class StageStatus(StrEnum):
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


# Stages that decide an item's verdict; cleanup is reported but never counts
VERDICT_STAGES = (StageName.BUILD, StageName.VALIDATE, StageName.REMOTE_TEST)
