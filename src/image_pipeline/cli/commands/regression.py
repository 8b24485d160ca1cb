"""Multi-version regression command."""

import typer

from image_pipeline.cli.utils import console
from image_pipeline.regression import RunOptions, print_summary
from image_pipeline.settings import get_settings
from image_pipeline.wiring import build_regression_pipeline, build_work_items


def regression(
    versions: str | None = typer.Option(
        None,
        "--versions",
        help='Override the configured versions, e.g. "2022 2025"',
    ),
    skip_build: bool = typer.Option(False, "--skip-build", help="Skip the build (assume images already exist)"),
    skip_remote_test: bool = typer.Option(
        False,
        "--skip-remote-test",
        "--skip-oxide",
        help="Skip the upload and boot test (build + validate only)",
    ),
    no_cleanup: bool = typer.Option(False, "--no-cleanup", help="Keep remote resources after each version"),
):
    """Build, validate and boot-test every configured version, then print a pass/fail table.

    Examples:
        image-pipeline regression
        image-pipeline regression --versions "2022" --skip-build --skip-remote-test
    """
    settings = get_settings()
    version_list = versions.replace(",", " ").split() if versions else None
    items = build_work_items(settings, version_list)
    if not items:
        console.print("[red]No versions configured[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Regression suite, versions: {' '.join(item.version for item in items)}[/bold]\n")
    options = RunOptions(skip_build=skip_build, skip_remote_test=skip_remote_test, no_cleanup=no_cleanup)
    summary = build_regression_pipeline(settings).run(items, options)

    print_summary(summary, console)
    raise typer.Exit(summary.exit_code)
