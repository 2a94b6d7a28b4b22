"""In-memory definition loader."""

from typing import TYPE_CHECKING, Any

from qaflow.errors import DefinitionNotFoundError
from qaflow.identifiers import Identifier

from .base import BaseLoader

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.schema import CommandDefinition, RunnerDefinition
    from qaflow.values import RuntimeValue

#: Raw definitions keyed by group, then by name.
type Definitions = Mapping[str, Mapping[str, Any]]


class MemoryLoader(BaseLoader):
    """Loader serving definitions from plain mappings.

    Definitions are validated lazily, when they are requested, exactly
    as the file loader validates parsed files.

    Example:
        >>> loader = MemoryLoader(runners={
        ...     'smoke': {'ping': {'steps': [{'plugin': 'echo'}]}},
        ... })
    """

    name = 'memory'

    def __init__(self, *, runners: 'Definitions | None' = None,
                 commands: 'Definitions | None' = None,
                 properties: 'Mapping[str, Mapping[str, RuntimeValue]] | None' = None,
                 context: 'Mapping[str, RuntimeValue] | None' = None,
                 config: 'Mapping[str, RuntimeValue] | None' = None) -> None:
        """Initialize the loader.

        Args:
            runners: Runner definitions by group and name.
            commands: Command definitions by group and name.
            properties: Property templates by plugin name.
            context: Initial global context.
            config: Runtime configuration.
        """
        self._runners = {group: dict(items) for group, items in (runners or {}).items()}
        self._commands = {group: dict(items) for group, items in (commands or {}).items()}
        self._properties = {plugin: dict(items) for plugin, items in (properties or {}).items()}
        self._context = dict(context or {})
        self._config = dict(config or {})

    async def command_groups(self) -> list[str]:
        return list(self._commands)

    async def runner_groups(self) -> list[str]:
        return list(self._runners)

    async def commands(self, group: str) -> list[str]:
        return list(self._commands.get(group, {}))

    async def runners(self, group: str) -> list[str]:
        return list(self._runners.get(group, {}))

    async def command(self, identifier: 'Identifier | str') -> 'CommandDefinition':
        identifier = Identifier.parse(identifier)
        data = self._find(self._commands, identifier, 'Command')

        return self.validate_command(identifier, data, source=f'{self.name}:{identifier}')

    async def runner(self, identifier: 'Identifier | str') -> 'RunnerDefinition':
        identifier = Identifier.parse(identifier)
        data = self._find(self._runners, identifier, 'Runner')

        return self.validate_runner(identifier, data, source=f'{self.name}:{identifier}')

    async def properties(self, plugin: str) -> dict[str, 'RuntimeValue']:
        return dict(self._properties.get(plugin, {}))

    async def context(self) -> dict[str, 'RuntimeValue']:
        return dict(self._context)

    async def config(self) -> dict[str, 'RuntimeValue']:
        return dict(self._config)

    @staticmethod
    def _find(definitions: dict[str, dict[str, Any]],
              identifier: Identifier, kind: str) -> Any:  # noqa: ANN401
        """Find raw definition data by identifier."""
        try:
            return definitions[identifier.group][identifier.name]
        except KeyError as base:
            raise DefinitionNotFoundError(f'{kind} {identifier} is not found') from base
