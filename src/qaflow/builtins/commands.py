"""Built-in plugin commands.

These commands have no side effects. They exist so that runners can be
exercised, and context variables can be shaped, without installing
third-party plugins.
"""

from typing import ClassVar

from qaflow.schema import BaseCommand, CommandResult


class EchoCommand(BaseCommand):
    """Return the merged properties as the command output.

    Useful to compute values from context variables and to register
    them for later steps.
    """

    name: ClassVar[str] = 'echo'

    async def run(self) -> CommandResult:
        """Echo the properties back."""
        return {'output': dict(self.props)}


class EmptyCommand(BaseCommand):
    """A logic-neutral command acting as a placeholder step.

    Accepts any properties but performs no processing, effectively
    serving as a 'pass' statement within a runner.
    """

    name: ClassVar[str] = 'empty'

    async def run(self) -> CommandResult:
        """Do nothing."""
        return {'output': None}


#: Built-in plugin commands addressable by name without entry points.
BUILTIN_COMMANDS: dict[str, type[BaseCommand]] = {
    EchoCommand.name: EchoCommand,
    EmptyCommand.name: EmptyCommand,
}
