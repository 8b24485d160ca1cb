"""CLI output helpers shared across commands."""

import typer
from rich.console import Console

from image_pipeline.validation import CheckRecord, Severity

console = Console()

_STYLES = {
    Severity.PASS: "green",
    Severity.FAIL: "red",
    Severity.WARN: "yellow",
    Severity.INFO: "dim",
}


def format_record(record: CheckRecord) -> str:
    severity = Severity(record.severity)
    style = _STYLES[severity]
    # Escape the tag's opening bracket so rich does not read it as markup
    return f"[{style}]\\{severity.tag}[/{style}] {record.message}"


def finish_with_records(records: list[CheckRecord], summary_line: str, exit_code: int, operation_name: str) -> None:
    """Print failed records and the tally, then exit with ``exit_code``.

    Args:
        records: Every record the operation produced
        summary_line: ``<name>: N passed, M failed, K warnings``
        exit_code: 0 when no record failed
        operation_name: Name of the operation for the final message

    Raises:
        typer.Exit: Always, carrying ``exit_code``
    """
    failures = [record for record in records if record.severity == Severity.FAIL]
    if failures:
        console.print(f"\n[red]{operation_name.capitalize()} failed![/red]\n")
        for record in failures:
            console.print(f"  {format_record(record)}")

    console.print(f"\n{summary_line}")
    if exit_code == 0:
        console.print(f"[green]{operation_name.capitalize()} passed[/green]")
    raise typer.Exit(exit_code)
