"""Structural validation command."""

from pathlib import Path

import typer
from dotenv import dotenv_values

from image_pipeline.checks import build_image_validator
from image_pipeline.cli.utils import console, finish_with_records
from image_pipeline.settings import get_settings


def validate(
    image: Path | None = typer.Argument(
        None,
        help="Raw image to validate (defaults to OUTPUT_IMAGE from the build env file)",
    ),
):
    """Validate a built raw image without modifying it.

    Works on a sparse private copy attached read-only: GPT layout and shrink,
    OS partition content (sysprep, drivers, agents, sshd) and the serial
    console setting in the boot configuration.

    Examples:
        image-pipeline validate output/windows-server-2022.raw
    """
    settings = get_settings()
    image = image or image_from_env_file(settings.build_env_file)
    if image is None:
        console.print("[red]No image path provided and OUTPUT_IMAGE not set in the build env file[/red]")
        raise typer.Exit(1)

    report = build_image_validator(settings).validate(image)
    finish_with_records(report.records, report.summary_line, report.exit_code, "validation")


def image_from_env_file(env_file: Path) -> Path | None:
    """Read ``OUTPUT_IMAGE`` from a build env file, if present."""
    if not env_file.is_file():
        return None
    value = dotenv_values(env_file).get("OUTPUT_IMAGE")
    return Path(value) if value else None
