"""Tests for command execution."""

from typing import TYPE_CHECKING

import pytest

from qaflow.builtins.commands import EchoCommand, EmptyCommand
from qaflow.core import CommandExecutor
from qaflow.errors import ExecutionError
from tests.examples.commands import FailingCommand, ScalarCommand

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.asyncio
async def test_execute_returns_result() -> None:
    """Return the command result."""
    result = await CommandExecutor().execute(EchoCommand({'message': 'hi'}))

    assert result == {'output': {'message': 'hi'}}


@pytest.mark.asyncio
async def test_execute_empty_command() -> None:
    """Run the built-in command producing no output."""
    result = await CommandExecutor().execute(EmptyCommand({}))

    assert result == {'output': None}


@pytest.mark.asyncio
async def test_execute_delay_in_milliseconds(mocker: 'MockerFixture') -> None:
    """Sleep for the `delay` property before running."""
    sleep = mocker.patch('qaflow.core.executor.sleep', new_callable=mocker.AsyncMock)

    await CommandExecutor().execute(EchoCommand({'delay': 250}))

    sleep.assert_awaited_once_with(0.25)


@pytest.mark.asyncio
@pytest.mark.parametrize('delay', (0, -5, '100', None, True))
async def test_execute_without_delay(mocker: 'MockerFixture', delay: object) -> None:
    """Skip sleeping unless the delay is a positive number."""
    sleep = mocker.patch('qaflow.core.executor.sleep', new_callable=mocker.AsyncMock)

    await CommandExecutor().execute(EchoCommand({'delay': delay}))

    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_execute_wraps_errors() -> None:
    """Wrap command failures, keeping the original as the cause."""
    with pytest.raises(ExecutionError, match=r"^Command 'failing' failed: timeout$") as error:
        await CommandExecutor().execute(FailingCommand({'error': 'timeout'}))

    assert error.value.command == 'failing'
    assert isinstance(error.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_execute_rejects_non_mapping() -> None:
    """Fail on results that are not mappings."""
    with pytest.raises(ExecutionError, match=r"returned 'int' instead of a mapping"):
        await CommandExecutor().execute(ScalarCommand({}))
