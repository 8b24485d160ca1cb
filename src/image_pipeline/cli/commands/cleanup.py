"""Remote project cleanup command."""

import typer

from image_pipeline.cli.utils import console
from image_pipeline.exceptions import PreconditionError
from image_pipeline.settings import get_settings
from image_pipeline.wiring import build_oxide_client, build_project_cleaner


def cleanup(
    project: str | None = typer.Option(None, "--project", "-p", help="Override the configured project"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt and delete everything in the project",
    ),
):
    """Delete every instance, disk, snapshot and image in the project.

    Running instances are stopped first; disks stuck mid-import are stopped
    and finalized so they can be deleted.

    Examples:
        image-pipeline cleanup
        image-pipeline cleanup --project image-tests --yes
    """
    settings = get_settings()
    try:
        client = build_oxide_client(settings, project)
    except PreconditionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None
    if not client.available():
        console.print(f"[red]{client.binary} CLI not found, install it or add it to PATH[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]PROJECT: {client.project}[/bold]")
    if not yes:
        console.print("[yellow]This will delete ALL instances, disks, snapshots and images in the project above.[/yellow]")
        if not typer.confirm("Continue?"):
            console.print("[yellow]Aborted.[/yellow]")
            raise typer.Exit(0)

    report = build_project_cleaner(settings, client).cleanup_project()

    console.print(f"\nDeleted {len(report.deleted)} resource(s)")
    if report.warnings:
        console.print(f"[yellow]{len(report.warnings)} warning(s), some resources may remain:[/yellow]")
        for warning in report.warnings:
            console.print(f"  {warning}")
    else:
        console.print(f"[green]All resources removed from project '{client.project}'[/green]")
