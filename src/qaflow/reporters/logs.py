"""Reporter writing progress to the standard logging system."""

import logging
from typing import TYPE_CHECKING

from .base import BaseReporter

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.identifiers import Identifier
    from qaflow.schema import TestResult
    from qaflow.values import RuntimeValue

    from .base import RunnerResult


class LoggingReporter(BaseReporter):
    """Reporter emitting log records.

    Failures are logged at ERROR level, runner outcomes at INFO and step
    details at DEBUG.
    """

    name = 'logging'

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger('qaflow.report')

    def on_runner(self, runner: 'Identifier', title: str) -> None:
        self.logger.info('runner %s started: %s', runner, title)

    def on_runner_error(self, runner: 'Identifier | str', error: Exception) -> None:
        self.logger.error('runner %s: %s', runner, error)

    def on_step(self, runner: 'Identifier', props: 'Mapping[str, RuntimeValue]',
                name: str) -> None:
        self.logger.debug('runner %s step %s with %r', runner, name, dict(props))

    def on_step_done(self, runner: 'Identifier', name: str) -> None:
        self.logger.debug('runner %s step %s done', runner, name)

    def on_test(self, runner: 'Identifier', result: 'TestResult') -> None:
        if result.passed:
            self.logger.info('runner %s test %r passed', runner, result.name)
        else:
            self.logger.error('runner %s test %r failed: %s', runner, result.name, result.error)

    def on_runner_done(self, runner: 'Identifier', result: 'RunnerResult') -> None:
        if isinstance(result, Exception):
            self.logger.error('runner %s failed: %s', runner, result)
        else:
            self.logger.info('runner %s done %s', runner, result)
