"""Reporter contract.

Reporters are notified at every transition of the runner state machine.
Notifications are fire-and-forget: return values are ignored and a
reporter never changes the course of a runner.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.identifiers import Identifier
    from qaflow.schema import TestResult
    from qaflow.values import RuntimeValue

#: Terminal result of a runner: the success marker or the captured error.
type RunnerResult = str | Exception


class BaseReporter(ABC):
    """Base class for progress reporters."""

    #: Display name of the reporter.
    name: ClassVar[str] = 'reporter'

    @abstractmethod
    def on_runner(self, runner: 'Identifier', title: str) -> None:
        """Report a runner that has been loaded and is about to start.

        Args:
            runner: Identifier of the runner.
            title: Display title of the runner definition.
        """

    @abstractmethod
    def on_runner_error(self, runner: 'Identifier | str', error: Exception) -> None:
        """Report a runner level failure.

        Called when the runner can not be loaded, when a command fails,
        when registration fails and for the first failed test of a step.
        """

    @abstractmethod
    def on_step(self, runner: 'Identifier', props: 'Mapping[str, RuntimeValue]',
                name: str) -> None:
        """Report a prepared step about to execute.

        Args:
            runner: Identifier of the runner.
            props: Merged properties of the prepared command.
            name: Step display name, the step name followed by the
                command name.
        """

    @abstractmethod
    def on_step_done(self, runner: 'Identifier', name: str) -> None:
        """Report a completed step."""

    @abstractmethod
    def on_test(self, runner: 'Identifier', result: 'TestResult') -> None:
        """Report a single test result."""

    @abstractmethod
    def on_runner_done(self, runner: 'Identifier', result: RunnerResult) -> None:
        """Report the terminal result of a runner."""

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}(name={self.name!r})'


class NullReporter(BaseReporter):
    """Reporter discarding every notification."""

    name = 'null'

    def on_runner(self, runner: 'Identifier', title: str) -> None:
        return None

    def on_runner_error(self, runner: 'Identifier | str', error: Exception) -> None:
        return None

    def on_step(self, runner: 'Identifier', props: 'Mapping[str, RuntimeValue]',
                name: str) -> None:
        return None

    def on_step_done(self, runner: 'Identifier', name: str) -> None:
        return None

    def on_test(self, runner: 'Identifier', result: 'TestResult') -> None:
        return None

    def on_runner_done(self, runner: 'Identifier', result: RunnerResult) -> None:
        return None
