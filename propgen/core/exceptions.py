"""Classified trial errors.

Every error carries a FailureRecord so the harness can report it as data and
test runners can re-raise it.
"""

from collections.abc import Iterable
from typing import Any, ClassVar

from propgen.schemas.trial import FailureKind, FailureRecord


class RecordedError(Exception):
    """Mixin base for errors that map to a FailureRecord."""

    kind: ClassVar[FailureKind]

    def __init__(
        self,
        message: str,
        *,
        input: Iterable[Any] = (),
        outputs: Iterable[Any] = (),
        expected: str | None = None,
    ):
        self.record = FailureRecord(
            kind=self.kind,
            message=message,
            input=list(input),
            outputs=list(outputs),
            expected=expected,
        )
        super().__init__(message)


# =============================================================================
# Signature Errors (raised before any draw)
# =============================================================================


class SpecNotFoundError(RecordedError, LookupError):
    """Raised when the descriptor source cannot resolve a signature."""

    kind = FailureKind.SPEC_NOT_FOUND

    @classmethod
    def for_target(cls, target: str, reason: str) -> "SpecNotFoundError":
        return cls(f"Could not get signature for {target}: {reason}")


class SpecMismatchError(RecordedError, ValueError):
    """Raised when two implementations' signatures are not equivalent."""

    kind = FailureKind.SPEC_MISMATCH

    @classmethod
    def for_signatures(
        cls, name_a: str, signature_a: Any, name_b: str, signature_b: Any
    ) -> "SpecMismatchError":
        return cls(
            f"Function signatures do not match: {name_a} has {signature_a!r}, "
            f"{name_b} has {signature_b!r}",
            expected=repr(signature_a),
        )


# =============================================================================
# Trial Failures (raised while drawing)
# =============================================================================


class TrialFailure(RecordedError, AssertionError):
    """Base class for assertion-level trial failures."""


class ValidationFailureError(TrialFailure):
    """An output does not satisfy the return descriptor."""

    kind = FailureKind.VALIDATION_FAILURE


class ResultDivergenceError(TrialFailure):
    """Two implementations produced different or differently-valid outputs."""

    kind = FailureKind.RESULT_DIVERGENCE


class InvalidInputAcceptedError(TrialFailure):
    """An implementation returned normally on input it should have rejected."""

    kind = FailureKind.INVALID_INPUT_ACCEPTED


FAILURE_EXCEPTIONS: dict[FailureKind, type[RecordedError]] = {
    FailureKind.SPEC_NOT_FOUND: SpecNotFoundError,
    FailureKind.SPEC_MISMATCH: SpecMismatchError,
    FailureKind.VALIDATION_FAILURE: ValidationFailureError,
    FailureKind.RESULT_DIVERGENCE: ResultDivergenceError,
    FailureKind.INVALID_INPUT_ACCEPTED: InvalidInputAcceptedError,
}


def exception_for(record: FailureRecord) -> RecordedError:
    """Rebuild the exception matching a failure record."""
    exc_class = FAILURE_EXCEPTIONS[record.kind]
    return exc_class(
        record.message,
        input=record.input,
        outputs=record.outputs,
        expected=record.expected,
    )
