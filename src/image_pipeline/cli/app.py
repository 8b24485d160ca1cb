"""Main CLI application."""

import typer

from image_pipeline.cli.commands import cleanup, regression, remote_test, validate
from image_pipeline.logging import setup_logging

app = typer.Typer(
    name="image-pipeline",
    help="Build, validate and boot-test machine images",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Override the configured log level (TRACE, DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Global options for all commands."""
    if log_level:
        setup_logging(log_level, compact=True)


app.command(name="validate")(validate.validate)
app.command(name="remote-test")(remote_test.remote_test)
app.command(name="cleanup")(cleanup.cleanup)
app.command(name="regression")(regression.regression)
