"""Trial configuration and reporting schemas.

A trial emits either a success count or one structured failure record for
the test-reporting layer to render.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from propgen.core.config import settings
from propgen.schemas.common import BaseSchema

# =============================================================================
# Enums
# =============================================================================


class TrialKind(str, Enum):
    """What a trial checks."""

    CONFORMANCE = "conformance"
    COMPARISON = "comparison"
    ROBUSTNESS = "robustness"


class FailureKind(str, Enum):
    """Classified trial failures."""

    SPEC_NOT_FOUND = "spec_not_found"
    SPEC_MISMATCH = "spec_mismatch"
    VALIDATION_FAILURE = "validation_failure"
    RESULT_DIVERGENCE = "result_divergence"
    INVALID_INPUT_ACCEPTED = "invalid_input_accepted"


# =============================================================================
# Options
# =============================================================================


class TrialOptions(BaseSchema):
    """Per-trial configuration. Defaults come from PROPGEN_* settings."""

    trial_count: int = Field(
        default_factory=lambda: settings.trial_count,
        ge=1,
        description="Number of independent draws per trial",
    )
    verbose_trace: bool = Field(
        default_factory=lambda: settings.verbose_trace,
        description="Log every draw and its outcome at INFO level",
    )
    seed: int | None = Field(
        default_factory=lambda: settings.seed,
        description="Fixed seed for reproducible draws",
    )
    derandomize: bool = Field(
        default_factory=lambda: settings.derandomize,
        description="Derive draws deterministically from the trial itself",
    )


# =============================================================================
# Reports
# =============================================================================


class FailureRecord(BaseSchema):
    """Structured description of why a trial failed."""

    kind: FailureKind
    message: str
    input: list[Any] = Field(default_factory=list)
    outputs: list[Any] = Field(default_factory=list)
    expected: str | None = None


class TrialReport(BaseSchema):
    """Outcome of one trial."""

    name: str
    kind: TrialKind
    trial_count: int
    successes: int = 0
    failure: FailureRecord | None = None

    @property
    def passed(self) -> bool:
        return self.failure is None

    def raise_for_failure(self) -> None:
        """Raise the exception matching the failure record, if any."""
        if self.failure is None:
            return
        from propgen.core.exceptions import exception_for

        raise exception_for(self.failure)
