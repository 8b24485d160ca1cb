"""CLI module for image-pipeline.

Provides command-line interface for validation, remote boot tests, cleanup and regression runs.
"""

from image_pipeline.cli.app import app

__all__ = ["app"]
