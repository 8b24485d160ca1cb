"""CLI entry point.

Usage:
    python -m image_pipeline.cli validate output/windows-server-2022.raw
    image-pipeline remote-test --version 2022
    image-pipeline cleanup --yes
    image-pipeline regression --versions "2022 2025" --skip-build
"""

from image_pipeline.cli.app import app
from image_pipeline.logging import setup_logging
from image_pipeline.settings import get_settings


def main() -> None:
    """CLI entry point with logging configuration."""
    setup_logging(get_settings().log_level, compact=True)
    app()


if __name__ == "__main__":
    main()
