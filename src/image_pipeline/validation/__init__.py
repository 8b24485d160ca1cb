"""Structural validation of raw disk images.

This module provides the validation runtime:
- Sections group related checks and run them in order
- Critical checks abort the validation, precondition checks stop their section
- Every assertion is a Pass/Fail/Warn/Info record; the image fails iff any Fail exists

The runtime is decoupled from the concrete checks, which live in
``image_pipeline.checks``.
"""

from .base import ImageCheck
from .builder import ImageValidatorBuilder
from .context import ValidationContext
from .enums import SectionStatus, Severity
from .models import CheckRecord, SectionResult, ValidationReport, count_severity
from .recorder import CheckRecorder
from .section import ValidationSection
from .validator import ImageValidator

__all__ = [
    # Core models
    "CheckRecord",
    "CheckRecorder",
    "SectionResult",
    "SectionStatus",
    "Severity",
    "ValidationReport",
    "count_severity",
    # Validation components
    "ImageCheck",
    "ImageValidator",
    "ImageValidatorBuilder",
    "ValidationContext",
    "ValidationSection",
]
