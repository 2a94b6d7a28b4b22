"""Plugin command contract.

A plugin command is the effectful unit a step invokes, for example an
HTTP call. The engine only knows how to construct a command from its
merged properties and how to await its `run()` coroutine; everything
else is up to the plugin.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.values import RuntimeValue

#: The mapping returned by a command. The `output` entry is the section
#: used by default for output registration and message lookups.
type CommandResult = dict[str, 'RuntimeValue']


class BaseCommand(ABC):
    """Base class for plugin commands.

    Subclasses are constructed fresh for every step invocation with the
    merged properties of the step and the plugin defaults.
    """

    #: Display name of the command used in reports.
    name: ClassVar[str] = 'command'

    def __init__(self, props: 'Mapping[str, RuntimeValue]') -> None:
        """Bind the command to its merged properties.

        Args:
            props: Plugin defaults merged with step-level properties.
        """
        self.props: dict[str, RuntimeValue] = dict(props)

    @abstractmethod
    async def run(self) -> CommandResult:
        """Execute the command.

        Returns:
            A mapping expected to contain an `output` entry.

        Raises:
            Any exception signalling the command failed.
        """

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}(name={self.name!r}, props={self.props!r})'
