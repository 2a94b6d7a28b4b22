"""Example plugin commands.

The commands are deterministic stand-ins for real plugins such as an
HTTP client. Every one of them records the properties it was
constructed with, so tests can inspect what a step actually received.
"""

from typing import ClassVar

from qaflow.schema import BaseCommand, CommandResult


class RecordCommand(BaseCommand):
    """Return the merged properties as the result output."""

    name = 'record'

    #: Properties of every constructed command, in construction order.
    calls: ClassVar[list[dict]] = []

    def __init__(self, props: dict) -> None:
        super().__init__(props)
        type(self).calls.append(self.props)

    async def run(self) -> CommandResult:
        return {'output': dict(self.props)}


class ResponseCommand(BaseCommand):
    """Return a canned HTTP-like response built from the properties."""

    name = 'response'

    async def run(self) -> CommandResult:
        return {
            'output': {
                'status': self.props.get('status', 200),
                'body': self.props.get('body'),
                'url': self.props.get('url'),
            },
            'meta': {'attempts': 1},
        }


class FailingCommand(BaseCommand):
    """Raise the error named by the `error` property."""

    name = 'failing'

    async def run(self) -> CommandResult:
        raise RuntimeError(self.props.get('error', 'connection refused'))


class ScalarCommand(BaseCommand):
    """Return something other than a mapping."""

    name = 'scalar'

    async def run(self) -> CommandResult:
        return 42  # type: ignore[return-value]


class HeadersCommand(BaseCommand):
    """Return a result without an output section."""

    name = 'headers'

    async def run(self) -> CommandResult:
        return {'headers': dict(self.props)}


class NotACommand:
    """Object registered as a plugin without being a command type."""

#: Example command types by plugin name.
EXAMPLE_COMMANDS: dict[str, type[BaseCommand]] = {
    command.name: command
    for command in (
        RecordCommand,
        ResponseCommand,
        FailingCommand,
        ScalarCommand,
        HeadersCommand,
    )
}
