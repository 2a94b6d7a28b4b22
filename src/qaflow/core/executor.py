"""Command execution."""

import logging
from asyncio import sleep
from collections.abc import Mapping
from typing import TYPE_CHECKING

from qaflow.errors import ExecutionError
from qaflow.values import is_number

if TYPE_CHECKING:
    from qaflow.schema import BaseCommand, CommandResult

logger = logging.getLogger(__name__)

#: Property holding the pre-execution delay, in milliseconds.
DELAY_PROPERTY = 'delay'


class CommandExecutor:
    """Runner of prepared commands.

    A command is attempted exactly once. If its `delay` property is a
    positive number of milliseconds, execution is suspended for that
    long before the command runs.
    """

    async def execute(self, command: 'BaseCommand') -> 'CommandResult':
        """Run a prepared command.

        Args:
            command: Prepared command.

        Returns:
            The command result.

        Raises:
            ExecutionError: If the command fails or returns something
                other than a mapping.
        """
        delay = command.props.get(DELAY_PROPERTY)
        if is_number(delay) and delay > 0:
            logger.debug('delaying %s command for %sms', command.name, delay)
            await sleep(delay / 1000)

        try:
            result = await command.run()

        except Exception as base:
            raise ExecutionError(
                f'Command {command.name!r} failed: {base}',
                command=command.name,
            ) from base

        if not isinstance(result, Mapping):
            raise ExecutionError(
                f'Command {command.name!r} returned {type(result).__name__!r} instead of a mapping',
                command=command.name,
            )

        logger.debug('command %s returned %r', command.name, result)

        return dict(result)
