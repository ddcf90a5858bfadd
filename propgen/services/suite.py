"""Trial suite builder.

Collects trials as named, invokable cases that a test runner can pick up,
typically through ``pytest.mark.parametrize``::

    suite = PropertySuite()
    suite.property_test(add)
    suite.validate_module(mymodule)

    @pytest.mark.parametrize("case", suite.cases, ids=suite.ids)
    def test_properties(case):
        case()
"""

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from propgen.schemas.trial import TrialKind, TrialReport
from propgen.services.harness import TrialHarness
from propgen.services.type_namer import callable_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialCase:
    """One registered trial."""

    name: str
    kind: TrialKind
    runner: Callable[[], TrialReport]

    def run(self) -> TrialReport:
        return self.runner()

    def __call__(self) -> TrialReport:
        """Run the trial and raise its failure, if any."""
        report = self.run()
        report.raise_for_failure()
        return report


class PropertySuite:
    """Registry of trial cases backed by one harness."""

    def __init__(self, harness: TrialHarness | None = None):
        self.harness = harness if harness is not None else TrialHarness()
        self.cases: list[TrialCase] = []

    @property
    def ids(self) -> list[str]:
        return [case.name for case in self.cases]

    def property_test(self, func: Callable[..., Any]) -> TrialCase:
        """Register a conformance trial for ``func``."""
        return self._add(
            f"{callable_name(func)} satisfies its return type",
            TrialKind.CONFORMANCE,
            lambda: self.harness.run_conformance(func),
        )

    def compare_test(self, func_a: Callable[..., Any], func_b: Callable[..., Any]) -> TrialCase:
        """Register a comparison trial between two implementations."""
        return self._add(
            f"{callable_name(func_a)} and {callable_name(func_b)} produce identical results",
            TrialKind.COMPARISON,
            lambda: self.harness.run_comparison(func_a, func_b),
        )

    def robust_test(self, func: Callable[..., Any]) -> TrialCase:
        """Register a robustness trial for ``func``."""
        return self._add(
            f"{callable_name(func)} rejects invalid input",
            TrialKind.ROBUSTNESS,
            lambda: self.harness.run_robustness(func),
        )

    def validate_module(self, module: ModuleType) -> list[TrialCase]:
        """Register conformance trials for every public function defined in a module.

        Functions the harness' descriptor source cannot describe are skipped.

        Args:
            module: Module whose functions should be checked

        Returns:
            The cases registered for the module
        """
        cases = []
        for name, func in inspect.getmembers(module, inspect.isfunction):
            if name.startswith("_") or func.__module__ != module.__name__:
                continue
            if not self._has_signature(func):
                logger.debug(f"Skipping {module.__name__}.{name}: no signature")
                continue
            cases.append(self.property_test(func))

        logger.info(f"Registered {len(cases)} trials for module {module.__name__}")
        return cases

    def _has_signature(self, func: Callable[..., Any]) -> bool:
        try:
            self.harness.source(func)
        except LookupError:
            return False
        return True

    def _add(self, name: str, kind: TrialKind, runner: Callable[[], TrialReport]) -> TrialCase:
        case = TrialCase(name=name, kind=kind, runner=runner)
        self.cases.append(case)
        return case
