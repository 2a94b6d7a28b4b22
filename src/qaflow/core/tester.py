"""Assertion evaluation.

Every test of a step is evaluated independently: a failed test never
prevents the following ones from running, and exactly one result is
produced per test, in declaration order.
"""

import logging
from typing import TYPE_CHECKING

from qaflow.builtins.assertions import ASSERTIONS
from qaflow.errors import AssertionFailure
from qaflow.lookups import lookup
from qaflow.schema import DEFAULT_SECTION, TestResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

if TYPE_CHECKING:
    from qaflow.builtins.assertions import Assertion
    from qaflow.schema import CommandResult, TestSpec
    from qaflow.values import RuntimeValue

logger = logging.getLogger(__name__)


class Tester:
    """Evaluator of step tests."""

    __test__ = False

    def __init__(self, assertions: 'Mapping[str, Assertion] | None' = None) -> None:
        """Initialize the evaluator.

        Args:
            assertions: Dispatch table of assertion kinds. Defaults to
                the built-in vocabulary.
        """
        self.assertions = dict(ASSERTIONS if assertions is None else assertions)

    @staticmethod
    def resolve_message(message: str | None, result: 'CommandResult') -> str | None:
        """Resolve a custom failure message.

        If the message is a path resolving to a string inside the result
        output section, the resolved string is used. Otherwise the
        message is used as is.
        """
        if not message:
            return None

        resolved = lookup(result.get(DEFAULT_SECTION), message)
        if isinstance(resolved, str):
            return resolved

        return message

    def check(self, spec: 'TestSpec', result: 'CommandResult',
              context: 'Mapping[str, RuntimeValue]') -> TestResult:
        """Evaluate a single test.

        Args:
            spec: Test specification.
            result: Command result.
            context: Effective context of the step.

        Returns:
            The test result. Failures are captured, never raised.
        """
        name = spec.display_name
        message = self.resolve_message(spec.message, result)

        assertion = self.assertions.get(spec.type)
        if assertion is None:
            return TestResult(
                name=name,
                error=AssertionFailure(message or f'{spec.type!r} unsupported assertion'),
            )

        actual = lookup({**context, **result}, spec.actual)

        try:
            assertion(actual, spec.expected, message)

        except AssertionFailure as error:
            logger.debug('test %r failed: %s', name, error.message)
            return TestResult(name=name, error=error)

        except Exception as base:
            logger.debug('test %r raised', name, exc_info=True)
            return TestResult(
                name=name,
                error=AssertionFailure(message or f'{spec.type}: {base}'),
            )

        return TestResult(name=name)

    def evaluate(self, tests: 'Iterable[TestSpec]', result: 'CommandResult',
                 context: 'Mapping[str, RuntimeValue] | None' = None) -> list[TestResult]:
        """Evaluate every test of a step.

        Args:
            tests: Test specifications in declaration order.
            result: Command result.
            context: Effective context of the step.

        Returns:
            One result per test, in declaration order.
        """
        return [
            self.check(spec, result, context or {})
            for spec in tests
        ]
