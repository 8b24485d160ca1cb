"""Upload and boot test command."""

from pathlib import Path

import typer

from image_pipeline.cli.utils import console, finish_with_records
from image_pipeline.exceptions import PreconditionError
from image_pipeline.settings import get_settings
from image_pipeline.wiring import build_oxide_client, build_remote_tester


def remote_test(
    image_path: Path | None = typer.Option(
        None,
        "--path",
        help="Raw image to upload (defaults to the version's output image)",
    ),
    version: str | None = typer.Option(None, "--version", "-v", help="Target version, e.g. 2022"),
    iso: Path | None = typer.Option(None, "--iso", help="Installation ISO; the version is derived from its name"),
    skip_upload: bool = typer.Option(False, "--skip-upload", help="Boot an already uploaded image"),
    image_name: str | None = typer.Option(None, "--image", help="Existing image to boot (implies --skip-upload)"),
    project: str | None = typer.Option(None, "--project", "-p", help="Override the configured project"),
):
    """Upload an image, boot it on the rack and verify the boot from the serial console.

    Examples:
        image-pipeline remote-test --version 2022
        image-pipeline remote-test --image win-server-2022-20250101 --version 2022
    """
    settings = get_settings()
    try:
        client = build_oxide_client(settings, project)
    except PreconditionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    if image_path is None and version:
        image_path = settings.output_dir / f"windows-server-{version}.raw"

    tester = build_remote_tester(settings, client)
    report = tester.run(version, image_path, skip_upload=skip_upload, image_name=image_name, iso_path=iso)
    finish_with_records(report.records, report.summary_line, report.exit_code, "remote test")
