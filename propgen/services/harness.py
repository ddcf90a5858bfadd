"""Trial harness.

Runs conformance, comparison and robustness trials against implementations,
drawing inputs through Hypothesis and checking outputs with validators built
from each implementation's signature.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

from hypothesis import HealthCheck, given, seed, settings

from propgen.core.exceptions import (
    InvalidInputAcceptedError,
    RecordedError,
    ResultDivergenceError,
    SpecMismatchError,
    ValidationFailureError,
)
from propgen.models.descriptors import DescriptorResolver, Signature
from propgen.schemas.trial import TrialKind, TrialOptions, TrialReport
from propgen.services.annotations import AnnotationSource, DescriptorSource
from propgen.services.equivalence import signatures_equivalent
from propgen.services.generators import input_generator
from propgen.services.invalid_generators import invalid_input_generator
from propgen.services.type_namer import callable_name, infer_type_name
from propgen.services.validators import validator

logger = logging.getLogger(__name__)

Implementation = Callable[..., Any]


# =============================================================================
# Counter
# =============================================================================


class TrialCounter:
    """Success counter owned by exactly one trial."""

    def __init__(self, name: str):
        self.name = name
        self.count = 0
        self.closed = False

    def increment(self) -> None:
        if self.closed:
            raise RuntimeError(f"Counter for {self.name} is already closed")
        self.count += 1

    def close(self) -> None:
        self.closed = True


@contextmanager
def open_counter(name: str) -> Generator[TrialCounter, None, None]:
    """Context manager scoping a counter to one trial."""
    counter = TrialCounter(name)
    try:
        yield counter
    finally:
        counter.close()
        logger.info(f"  ✓ {counter.count} successful property test runs for {name}")


# =============================================================================
# Harness
# =============================================================================


class TrialHarness:
    """Property-trial runner.

    Signatures come from ``source`` (AnnotationSource by default) and remote
    references resolve through ``resolver``, or through the source's registry
    when it has one.
    """

    def __init__(
        self,
        source: DescriptorSource | None = None,
        resolver: DescriptorResolver | None = None,
        options: TrialOptions | None = None,
    ):
        self.source = source if source is not None else AnnotationSource()
        self.resolver = resolver if resolver is not None else getattr(self.source, "registry", None)
        self.options = options if options is not None else TrialOptions()

    # -------------------------------------------------------------------------
    # Trials
    # -------------------------------------------------------------------------

    def run_conformance(self, impl: Implementation) -> TrialReport:
        """Check that outputs on generated inputs satisfy the return descriptor.

        Args:
            impl: Implementation under test

        Returns:
            TrialReport with the success count or a validation failure
        """
        name = callable_name(impl)
        report = self._new_report(name, TrialKind.CONFORMANCE)

        try:
            signature = self.source(impl)
        except RecordedError as e:
            return self._failed(report, e)

        validate = validator(signature.returns, self.resolver)

        def check(args: tuple[Any, ...]) -> None:
            output = impl(*args)
            self._trace(f"{name}{_format_args(args)} -> {output!r}")
            if not validate(output):
                raise ValidationFailureError(
                    f"Output of {name} does not match its return type: got "
                    f"{infer_type_name(output)} {output!r}, expected {signature.returns!r}",
                    input=args,
                    outputs=[output],
                    expected=repr(signature.returns),
                )

        return self._run(report, input_generator(signature.params, self.resolver), check)

    def run_comparison(self, impl_a: Implementation, impl_b: Implementation) -> TrialReport:
        """Check that two implementations agree on every generated input.

        Both signatures must be equivalent before anything is drawn.
        """
        name_a, name_b = callable_name(impl_a), callable_name(impl_b)
        report = self._new_report(f"{name_a} vs {name_b}", TrialKind.COMPARISON)

        try:
            signature_a = self.source(impl_a)
            signature_b = self.source(impl_b)
            if not signatures_equivalent(signature_a, signature_b):
                raise SpecMismatchError.for_signatures(name_a, signature_a, name_b, signature_b)
        except RecordedError as e:
            return self._failed(report, e)

        validate = validator(signature_a.returns, self.resolver)

        def check(args: tuple[Any, ...]) -> None:
            output_a = impl_a(*args)
            output_b = impl_b(*args)
            self._trace(f"{_format_args(args)}: {name_a} -> {output_a!r}, {name_b} -> {output_b!r}")

            if not validate(output_a) or not validate(output_b):
                problem = "produced outputs not matching the return type"
            elif output_a != output_b:
                problem = "produced different outputs"
            else:
                return

            raise ResultDivergenceError(
                f"{name_a} and {name_b} {problem}: {output_a!r} "
                f"({infer_type_name(output_a)}) vs {output_b!r} ({infer_type_name(output_b)})",
                input=args,
                outputs=[output_a, output_b],
                expected=repr(signature_a.returns),
            )

        return self._run(report, input_generator(signature_a.params, self.resolver), check)

    def run_robustness(self, impl: Implementation) -> TrialReport:
        """Check that an implementation raises on inputs that violate its signature.

        Any Exception counts as a rejection. AssertionErrors are not treated
        as rejections and propagate unchanged.
        """
        name = callable_name(impl)
        report = self._new_report(name, TrialKind.ROBUSTNESS)

        try:
            signature = self.source(impl)
        except RecordedError as e:
            return self._failed(report, e)

        def check(args: tuple[Any, ...]) -> None:
            try:
                output = impl(*args)
            except AssertionError:
                raise
            except Exception as e:
                self._trace(f"{name}{_format_args(args)} rejected with {type(e).__name__}: {e}")
                return

            raise InvalidInputAcceptedError(
                f"{name} accepted invalid input {_format_args(args)} and returned {output!r}",
                input=args,
                outputs=[output],
                expected="an exception",
            )

        return self._run(report, invalid_input_generator(signature.params, self.resolver), check)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _new_report(self, name: str, kind: TrialKind) -> TrialReport:
        logger.info(f"Running {kind.value} trial for {name} ({self.options.trial_count} draws)")
        return TrialReport(name=name, kind=kind, trial_count=self.options.trial_count)

    def _failed(self, report: TrialReport, error: RecordedError) -> TrialReport:
        logger.warning(f"⚠️  {report.kind.value} trial for {report.name} failed: {error}")
        return report.model_copy(update={"failure": error.record})

    def _run(
        self,
        report: TrialReport,
        strategy: Any,
        check: Callable[[tuple[Any, ...]], None],
    ) -> TrialReport:
        """Run ``check`` over draws from ``strategy`` with a scoped counter."""
        with open_counter(report.name) as counter:
            draws = self._property(strategy, check, counter)
            try:
                draws()
            except RecordedError as e:
                return self._failed(report.model_copy(update={"successes": counter.count}), e)
            return report.model_copy(update={"successes": counter.count})

    def _property(
        self,
        strategy: Any,
        check: Callable[[tuple[Any, ...]], None],
        counter: TrialCounter,
    ) -> Callable[[], None]:
        options = self.options

        @settings(
            max_examples=options.trial_count,
            database=None,
            deadline=None,
            derandomize=options.derandomize,
            report_multiple_bugs=False,
            suppress_health_check=[
                HealthCheck.too_slow,
                HealthCheck.filter_too_much,
                HealthCheck.large_base_example,
            ],
        )
        @given(strategy)
        def draws(args: tuple[Any, ...]) -> None:
            check(args)
            counter.increment()

        if options.seed is not None:
            draws = seed(options.seed)(draws)
        return draws

    def _trace(self, message: str) -> None:
        if self.options.verbose_trace:
            logger.info(message)
        else:
            logger.debug(message)


def _format_args(args: tuple[Any, ...]) -> str:
    return "(" + ", ".join(repr(arg) for arg in args) + ")"
