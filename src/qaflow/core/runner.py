"""Runner state machine.

A runner is executed step by step, strictly in declaration order::

    BEGIN -> STEP_LOOP -> DONE | ABORTED

    STEP_LOOP:
        CONTEXT_MERGE -> COMMAND_PREP -> EXECUTING
                      -> OUTPUT_REGISTER? -> ASSERT? -> CLEANUP

The reporter is notified at every transition. A failed command, an
unresolved registration or a failed test (unless the step continues on
failure) ends the runner with a `RunnerAbortError`. Preparation errors
mean the runner can not start the step at all and are propagated.
"""

import logging
from typing import TYPE_CHECKING

from qaflow.context import Scope
from qaflow.errors import ErrorContext, ExecutionError, PathResolutionError, RunnerAbortError
from qaflow.schema import DEFAULT_SECTION

from .executor import CommandExecutor
from .outputs import OutputRegister
from .tester import Tester

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.context import ContextStore
    from qaflow.errors import QaflowError
    from qaflow.identifiers import Identifier
    from qaflow.loaders import BaseLoader
    from qaflow.reporters import BaseReporter, RunnerResult
    from qaflow.schema import CommandResult, Step, TestResult
    from qaflow.values import RuntimeValue

    from .preparer import CommandPreparer

logger = logging.getLogger(__name__)

#: Terminal result of a runner that completed without failures.
SUCCESS = '✓'


class RunnerExecutor:
    """Executor of a single runner."""

    def __init__(self, loader: 'BaseLoader', reporter: 'BaseReporter',
                 store: 'ContextStore', preparer: 'CommandPreparer', *,
                 executor: CommandExecutor | None = None,
                 register: OutputRegister | None = None,
                 tester: Tester | None = None,
                 skip: bool = False) -> None:
        """Initialize the executor.

        Args:
            loader: Definition loader.
            reporter: Progress reporter.
            store: Shared context store.
            preparer: Command preparer bound to the same store.
            executor: Command executor.
            register: Output register bound to the same store.
            tester: Assertion evaluator.
            skip: Continue on failed tests for every step, as if each
                step declared `skipOnFail`.
        """
        self.loader = loader
        self.reporter = reporter
        self.store = store
        self.preparer = preparer
        self.executor = executor or CommandExecutor()
        self.register = register or OutputRegister(store)
        self.tester = tester or Tester()
        self.skip = skip

    async def run(self, identifier: 'Identifier') -> 'RunnerResult':
        """Execute a runner.

        Args:
            identifier: Identifier of the runner.

        Returns:
            The success marker or the `RunnerAbortError` that ended the
            runner.

        Raises:
            Any error raised while preparing a step command.
        """
        self.store.reset(Scope.RUNNER)
        self.store.reset(Scope.STEP)

        try:
            definition = await self.loader.runner(identifier)

        except Exception as error:
            logger.debug('runner %s failed to load', identifier, exc_info=True)
            self.reporter.on_runner_error(identifier, error)
            return self._abort(identifier, error)

        self.reporter.on_runner(identifier, definition.title or f'{definition.identifier}')
        logger.info('runner %s started with %d steps', identifier, len(definition.steps))

        terminal: RunnerResult | None = None
        failure: RunnerAbortError | None = None

        for step_num, step in enumerate(definition.steps):
            # CONTEXT_MERGE
            self.store.merge(self.store.effective().render(step.context), Scope.STEP)

            # COMMAND_PREP
            command = await self.preparer.prepare(step.plugin, step.props)
            label = self.label(step, command.name)
            self.reporter.on_step(identifier, command.props, label)

            # EXECUTING, OUTPUT_REGISTER
            try:
                result = await self.executor.execute(command)
                if result.get(DEFAULT_SECTION) is not None and step.registration:
                    self.register.register(step.registration, result)

            except (ExecutionError, PathResolutionError) as error:
                self.reporter.on_runner_error(identifier, error)
                terminal = self._abort(
                    identifier,
                    error,
                    step=label,
                    step_num=step_num,
                    element=command.props,
                    values=self.store.effective(),
                )
                break

            # ASSERT
            if step.tests:
                error = self._check(identifier, step, step_num, label, command.props, result)
                if error is not None:
                    if not (step.skip_on_fail or self.skip):
                        terminal = error
                        break
                    failure = failure or error

            # CLEANUP
            self.store.reset(Scope.STEP)
            self.reporter.on_step_done(identifier, label)

        outcome = terminal or failure or SUCCESS

        self.reporter.on_runner_done(identifier, outcome)
        logger.info('runner %s done: %s', identifier, SUCCESS if outcome == SUCCESS else 'failed')

        return outcome

    def _check(self, identifier: 'Identifier', step: 'Step', step_num: int,
               label: str, props: 'Mapping[str, RuntimeValue]',
               result: 'CommandResult') -> RunnerAbortError | None:
        """Evaluate and report the tests of a step.

        Returns:
            An abort error describing the first failed test, if any.
        """
        results: list[TestResult] = self.tester.evaluate(
            step.tests or [],
            result,
            self.store.effective(),
        )

        for test in results:
            self.reporter.on_test(identifier, test)

        failed = next((
            (test_num, test)
            for test_num, test in enumerate(results)
            if not test.passed
        ), None)
        if failed is None:
            return None

        test_num, test = failed
        self.reporter.on_runner_error(identifier, test.error)

        return self._abort(
            identifier,
            test.error,
            step=label,
            step_num=step_num,
            test_num=test_num,
            element=props,
            values=self.store.effective(),
        )

    @staticmethod
    def label(step: 'Step', command: str) -> str:
        """Display name of a step: the step name followed by the command name."""
        return f'{step.name} {command}'.strip()

    @staticmethod
    def _abort(identifier: 'Identifier', error: 'Exception | QaflowError', *,
               step: str | None = None, step_num: int | None = None,
               test_num: int | None = None,
               element: 'Mapping[str, RuntimeValue] | None' = None,
               values: 'Mapping[str, RuntimeValue] | None' = None) -> RunnerAbortError:
        """Wrap the error that ended a runner.

        The properties of the failing command and the effective context
        at the moment of failure are kept for the error snippet.
        """
        context = ErrorContext(runner=f'{identifier}', error=error)
        if element is not None:
            context['element'] = dict(element)
        if values:
            context['context'] = dict(values)
        if step_num is not None:
            context['step_num'] = step_num
        if test_num is not None:
            context['test_num'] = test_num

        message = getattr(error, 'message', None) or f'{error}'

        return RunnerAbortError(
            f'Runner {identifier} aborted: {message}',
            runner=f'{identifier}',
            step=step,
            cause=error,
            context=context,
        )
