"""Summary table of a regression run."""

from rich.console import Console
from rich.table import Table

from .enums import StageName, StageStatus
from .models import RegressionSummary

_STYLES = {
    StageStatus.PASS: "green",
    StageStatus.FAIL: "red",
    StageStatus.SKIP: "dim",
}


def status_word(status: StageStatus | None, stage: StageName) -> str:
    """Display word for a stage status; a failed cleanup is only a warning."""
    if status is None:
        return "-"
    if stage == StageName.CLEANUP and status == StageStatus.FAIL:
        return "[yellow]WARN[/yellow]"
    return f"[{_STYLES[status]}]{status.upper()}[/{_STYLES[status]}]"


def build_summary_table(summary: RegressionSummary) -> Table:
    table = Table(title="REGRESSION SUMMARY")
    table.add_column("VERSION")
    for stage in StageName:
        table.add_column(stage.upper())

    for item in summary.items:
        table.add_row(item.version, *(status_word(item.status_for(stage), stage) for stage in StageName))
    return table


def print_summary(summary: RegressionSummary, console: Console | None = None) -> None:
    console = console or Console()
    console.print(build_summary_table(summary))
    if summary.passed:
        console.print("[green]Result: ALL PASS[/green]")
    else:
        console.print("[red]Result: FAILURES DETECTED[/red]")
