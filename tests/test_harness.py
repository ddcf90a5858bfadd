"""Tests for the trial harness.

Tests cover:
- Conformance trials and validation failures
- Comparison trials, signature mismatches and divergent results
- Robustness trials, including AssertionError propagation
- Scoped trial counters
"""

import logging
from dataclasses import dataclass

import pytest

from propgen.core.exceptions import ValidationFailureError
from propgen.models import Primitive, Sequence
from propgen.schemas import FailureKind, TrialKind, TrialOptions
from propgen.services.annotations import SignatureRegistry
from propgen.services.harness import TrialCounter, TrialHarness, open_counter

# =============================================================================
# Implementations Under Test
# =============================================================================


def add(a: int, b: int) -> int:
    return a + b


def add_reversed(a: int, b: int) -> int:
    return b + a


def add_off_by_one(a: int, b: int) -> int:
    return a + b + 1


def concat(a: str, b: str) -> str:
    return a + b


def stringify(x: int) -> int:
    return str(x)


def guarded_double(x: int) -> int:
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"expected an integer, got {x!r}")
    return x * 2


def guarded_checksum(data: bytes) -> int:
    if not isinstance(data, bytes):
        raise TypeError(f"expected bytes, got {type(data).__name__}")
    return sum(data)


def identity(x: int) -> int:
    return x


def asserting_identity(x: int) -> int:
    assert isinstance(x, int), "nested check failed"
    return x


def unannotated(x):
    return x


@dataclass
class Point:
    x: int
    y: int


def translate(point: Point, dx: int) -> Point:
    return Point(point.x + dx, point.y)


@dataclass
class Dangling:
    child: "Missing"  # noqa: F821


def uses_dangling(node: Dangling) -> int:
    return 0


@pytest.fixture
def options():
    return TrialOptions(trial_count=100, verbose_trace=False, seed=None, derandomize=False)


@pytest.fixture
def harness(options):
    return TrialHarness(options=options)


# =============================================================================
# Conformance
# =============================================================================


class TestConformanceTrials:
    """Outputs must satisfy the return descriptor."""

    def test_passing_trial(self, harness):
        report = harness.run_conformance(guarded_double)

        assert report.passed
        assert report.kind == TrialKind.CONFORMANCE
        assert report.successes == 100
        assert report.name.endswith("guarded_double")

    def test_dataclass_records(self, harness):
        report = harness.run_conformance(translate)

        assert report.passed, report.failure

    def test_validation_failure(self, harness):
        report = harness.run_conformance(stringify)

        assert not report.passed
        assert report.failure.kind == FailureKind.VALIDATION_FAILURE
        assert len(report.failure.input) == 1
        assert isinstance(report.failure.outputs[0], str)
        assert "integer" in report.failure.expected
        assert "got string" in report.failure.message

    def test_raise_for_failure(self, harness):
        report = harness.run_conformance(stringify)

        with pytest.raises(ValidationFailureError):
            report.raise_for_failure()

    def test_missing_signature(self, harness):
        report = harness.run_conformance(unannotated)

        assert report.failure.kind == FailureKind.SPEC_NOT_FOUND
        assert report.successes == 0

    def test_unresolvable_field_annotation(self, harness):
        for _ in range(2):
            report = harness.run_conformance(uses_dangling)

            assert report.failure.kind == FailureKind.SPEC_NOT_FOUND
            assert report.successes == 0
            assert "Dangling" in report.failure.message

    def test_unclassified_exceptions_propagate(self, harness):
        def explode(x: int) -> int:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            harness.run_conformance(explode)

    def test_explicit_signature_source(self, options):
        registry = SignatureRegistry()
        registry.register(unannotated, [Primitive("integer")], Primitive("integer"))
        harness = TrialHarness(source=registry, options=options)

        report = harness.run_conformance(unannotated)

        assert report.passed

    def test_sequence_return_descriptors(self):
        registry = SignatureRegistry()
        registry.register(identity, [Sequence(Primitive("integer"))], Sequence(Primitive("integer")))
        harness = TrialHarness(source=registry, options=TrialOptions(trial_count=10))

        report = harness.run_conformance(identity)

        assert report.passed


# =============================================================================
# Comparison
# =============================================================================


class TestComparisonTrials:
    """Two implementations must agree on every shared input."""

    def test_equivalent_implementations(self, harness):
        report = harness.run_comparison(add, add_reversed)

        assert report.passed
        assert report.kind == TrialKind.COMPARISON
        assert report.successes == 100

    def test_divergent_results(self, harness):
        report = harness.run_comparison(add, add_off_by_one)

        assert report.failure.kind == FailureKind.RESULT_DIVERGENCE
        first, second = report.failure.outputs
        assert second == first + 1
        assert len(report.failure.input) == 2

    def test_signature_mismatch_before_any_draw(self, harness):
        calls = []

        def tracked_concat(a: str, b: str) -> str:
            calls.append((a, b))
            return concat(a, b)

        report = harness.run_comparison(add, tracked_concat)

        assert report.failure.kind == FailureKind.SPEC_MISMATCH
        assert report.successes == 0
        assert calls == []

    def test_invalid_outputs_diverge_even_when_equal(self, harness):
        def stringify_again(x: int) -> int:
            return str(x)

        report = harness.run_comparison(stringify, stringify_again)

        assert report.failure.kind == FailureKind.RESULT_DIVERGENCE
        assert "not matching the return type" in report.failure.message


# =============================================================================
# Robustness
# =============================================================================


class TestRobustnessTrials:
    """Implementations must raise on inputs that violate their signature."""

    def test_guarded_implementation_passes(self, harness):
        report = harness.run_robustness(guarded_double)

        assert report.passed
        assert report.kind == TrialKind.ROBUSTNESS
        assert report.successes > 0

    def test_binary_guard_rejects_every_draw(self, harness):
        report = harness.run_robustness(guarded_checksum)

        assert report.passed, report.failure
        assert report.successes == 100

    def test_unguarded_implementation_fails(self, harness):
        report = harness.run_robustness(identity)

        assert report.failure.kind == FailureKind.INVALID_INPUT_ACCEPTED
        assert report.failure.outputs == report.failure.input

    def test_assertion_errors_propagate(self, harness):
        with pytest.raises(AssertionError, match="nested check failed"):
            harness.run_robustness(asserting_identity)


# =============================================================================
# Options and Counters
# =============================================================================


class TestTrialOptions:
    """Per-trial configuration."""

    def test_trial_count_limits_draws(self):
        harness = TrialHarness(options=TrialOptions(trial_count=10))

        report = harness.run_comparison(add, add_reversed)

        assert report.trial_count == 10
        assert report.successes == 10

    def test_seeded_runs_are_reproducible(self):
        seen: list[list[int]] = [[], []]

        for run in seen:

            def record(xs: list[int]) -> list[int]:
                run.append(len(xs))
                return xs

            TrialHarness(options=TrialOptions(trial_count=20, seed=1234)).run_conformance(record)

        assert seen[0] == seen[1]

    def test_verbose_trace_logs_draws_at_info(self, caplog):
        harness = TrialHarness(options=TrialOptions(trial_count=5, verbose_trace=True))

        with caplog.at_level(logging.INFO, logger="propgen"):
            harness.run_conformance(guarded_double)

        assert "guarded_double(" in caplog.text
        assert "successful property test runs" in caplog.text

    def test_trial_count_must_be_positive(self):
        with pytest.raises(ValueError):
            TrialOptions(trial_count=0)


class TestTrialCounter:
    """Counters are scoped to one trial."""

    def test_counter_closed_after_block(self):
        with open_counter("trial") as counter:
            counter.increment()
            counter.increment()

        assert counter.count == 2
        assert counter.closed

    def test_counter_closed_on_error(self):
        with pytest.raises(RuntimeError, match="inside"):
            with open_counter("trial") as counter:
                raise RuntimeError("inside")

        assert counter.closed

    def test_closed_counter_rejects_increments(self):
        counter = TrialCounter("trial")
        counter.close()

        with pytest.raises(RuntimeError):
            counter.increment()

    def test_independent_counters(self):
        with open_counter("first") as first, open_counter("second") as second:
            first.increment()

        assert first.count == 1
        assert second.count == 0
