"""Image build, validation and boot-test pipeline."""

from .settings import Settings, get_settings  # noqa: F401

__all__ = ["get_settings", "Settings"]
