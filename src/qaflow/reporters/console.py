"""Console reporter."""

from typing import TYPE_CHECKING

from click import echo, style

from .base import BaseReporter

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.identifiers import Identifier
    from qaflow.schema import TestResult
    from qaflow.values import RuntimeValue

    from .base import RunnerResult

#: Marker printed in front of failed tests.
FAILURE = '✗'

INDENT = '  '


class ConsoleReporter(BaseReporter):
    """Reporter printing plain styled lines with click.

    Runner and test outcomes are always printed. Step boundaries are
    printed at verbosity 1, merged step properties at verbosity 2.
    """

    name = 'console'

    def __init__(self, verbosity: int = 0, *, color: bool | None = None) -> None:
        """Initialize the reporter.

        Args:
            verbosity: Detail level.
            color: Force or disable colors. Detected from the terminal
                if not set.
        """
        self.verbosity = verbosity
        self.color = color

    def _echo(self, message: str, *, err: bool = False, **styles: str | bool) -> None:
        echo(style(message, **styles) if styles else message, err=err, color=self.color)

    def on_runner(self, runner: 'Identifier', title: str) -> None:
        self._echo(f'{runner} {title}' if title != f'{runner}' else f'{runner}', bold=True)

    def on_runner_error(self, runner: 'Identifier | str', error: Exception) -> None:
        self._echo(f'{INDENT}{runner}: {error}', fg='red', err=True)

    def on_step(self, runner: 'Identifier', props: 'Mapping[str, RuntimeValue]',
                name: str) -> None:
        if self.verbosity > 0:
            self._echo(f'{INDENT}{name}', fg='cyan')
        if self.verbosity > 1:
            for key, value in props.items():
                self._echo(f'{INDENT * 2}{key}: {value!r}', dim=True)

    def on_step_done(self, runner: 'Identifier', name: str) -> None:
        return None

    def on_test(self, runner: 'Identifier', result: 'TestResult') -> None:
        if result.passed:
            self._echo(f'{INDENT * 2}✓ {result.name}', fg='green')
        else:
            self._echo(f'{INDENT * 2}{FAILURE} {result.name}: {result.error}', fg='red')

    def on_runner_done(self, runner: 'Identifier', result: 'RunnerResult') -> None:
        if isinstance(result, Exception):
            self._echo(f'{runner} {FAILURE}', fg='red', bold=True)
        else:
            self._echo(f'{runner} {result}', fg='green', bold=True)
