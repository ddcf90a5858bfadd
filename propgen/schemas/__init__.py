"""Pydantic schemas for trial options and reports."""

from propgen.schemas.common import BaseSchema
from propgen.schemas.trial import (
    FailureKind,
    FailureRecord,
    TrialKind,
    TrialOptions,
    TrialReport,
)

__all__ = [
    "BaseSchema",
    "FailureKind",
    "FailureRecord",
    "TrialKind",
    "TrialOptions",
    "TrialReport",
]
