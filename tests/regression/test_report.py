"""Tests for the regression summary table."""

from pathlib import Path

from rich.console import Console

from image_pipeline.regression import (
    RegressionSummary,
    StageName,
    StageResult,
    StageStatus,
    WorkItem,
    build_summary_table,
    print_summary,
)
from image_pipeline.regression.report import status_word


def make_item(version: str, cleanup_rc: int = 0, validate_rc: int = 0) -> WorkItem:
    item = WorkItem.for_version(version, Path("isos"), Path("output"))
    item.record(StageResult.from_exit_code(StageName.BUILD, 0))
    item.record(StageResult.from_exit_code(StageName.VALIDATE, validate_rc))
    item.record(StageResult.skipped(StageName.REMOTE_TEST, "skipped"))
    item.record(StageResult.from_exit_code(StageName.CLEANUP, cleanup_rc))
    return item


def test_failed_cleanup_shown_as_warning():
    assert "WARN" in status_word(StageStatus.FAIL, StageName.CLEANUP)
    assert "FAIL" in status_word(StageStatus.FAIL, StageName.VALIDATE)
    assert status_word(None, StageName.BUILD) == "-"


def test_table_has_one_row_per_version():
    summary = RegressionSummary(items=[make_item("2022"), make_item("2025")])

    table = build_summary_table(summary)

    assert [column.header for column in table.columns] == ["VERSION", "BUILD", "VALIDATE", "REMOTE_TEST", "CLEANUP"]
    assert table.row_count == 2


def test_print_summary_verdict():
    console = Console(record=True, width=120)

    print_summary(RegressionSummary(items=[make_item("2022", cleanup_rc=1)]), console)
    assert "Result: ALL PASS" in console.export_text()

    print_summary(RegressionSummary(items=[make_item("2022", validate_rc=1)]), console)
    assert "Result: FAILURES DETECTED" in console.export_text()
