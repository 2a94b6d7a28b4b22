"""Definition loader contract.

A loader is the only source of definitions for the engine. It lists
command and runner groups, supplies the definitions themselves, plugin
property templates, the initial context and the optional runtime
configuration.

All methods are coroutines. Failures propagate to the caller unchanged.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ValidationError

from qaflow.errors import DefinitionError
from qaflow.schema import CommandDefinition, RunnerDefinition

if TYPE_CHECKING:
    from qaflow.identifiers import Identifier
    from qaflow.values import RuntimeValue


class BaseLoader(ABC):
    """Base class for definition loaders."""

    #: Display name of the loader.
    name: ClassVar[str] = 'loader'

    @abstractmethod
    async def command_groups(self) -> list[str]:
        """List command group names."""

    @abstractmethod
    async def runner_groups(self) -> list[str]:
        """List runner group names."""

    @abstractmethod
    async def commands(self, group: str) -> list[str]:
        """List command names of a group."""

    @abstractmethod
    async def runners(self, group: str) -> list[str]:
        """List runner names of a group."""

    @abstractmethod
    async def command(self, identifier: 'Identifier') -> CommandDefinition:
        """Load a command definition.

        Raises:
            DefinitionNotFoundError: If the command does not exist.
            DefinitionError: If the definition is malformed.
        """

    @abstractmethod
    async def runner(self, identifier: 'Identifier') -> RunnerDefinition:
        """Load a runner definition.

        Raises:
            DefinitionNotFoundError: If the runner does not exist.
            DefinitionError: If the definition is malformed.
        """

    @abstractmethod
    async def properties(self, plugin: str) -> dict[str, 'RuntimeValue']:
        """Load the property template of a plugin.

        A plugin without a template has an empty one.
        """

    @abstractmethod
    async def context(self) -> dict[str, 'RuntimeValue']:
        """Load the initial global context."""

    async def config(self) -> dict[str, 'RuntimeValue']:
        """Load the optional runtime configuration.

        The `runners` entry lists the runners started when none are
        requested explicitly.
        """
        return {}

    @staticmethod
    def validate_runner(identifier: 'Identifier', data: Any,  # noqa: ANN401
                        source: str | None = None) -> RunnerDefinition:
        """Validate raw runner data.

        Raises:
            DefinitionError: If the data is not a valid runner.
        """
        return _validate(RunnerDefinition, identifier, data, source)

    @staticmethod
    def validate_command(identifier: 'Identifier', data: Any,  # noqa: ANN401
                         source: str | None = None) -> CommandDefinition:
        """Validate raw command data.

        Raises:
            DefinitionError: If the data is not a valid command.
        """
        return _validate(CommandDefinition, identifier, data, source)

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}(name={self.name!r})'


def _validate[T: (RunnerDefinition, CommandDefinition)](model: type[T], identifier: 'Identifier',
                                                         data: Any,  # noqa: ANN401
                                                         source: str | None) -> T:
    """Validate raw definition data against a definition model."""
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise DefinitionError(
            f'Definition of {identifier} must be a mapping',
            context={'source': source, 'element': data},
        )

    try:
        return model.model_validate({**data, 'identifier': identifier})
    except ValidationError as base:
        raise DefinitionError.from_pydantic_error(base, data=data, source=source) from base
