"""Command preparation.

Turns a step's plugin name and raw properties into a ready-to-run
command instance:

1. the plugin must be registered;
2. the plugin property template is fetched from the loader;
3. template and step properties are rendered against the effective
   context;
4. step properties are merged over the template defaults;
5. a fresh command is constructed with the merged properties.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.context import ContextStore
    from qaflow.core.plugins import PluginRegistry
    from qaflow.loaders import BaseLoader
    from qaflow.schema import BaseCommand
    from qaflow.values import RuntimeValue

logger = logging.getLogger(__name__)


class CommandPreparer:
    """Builder of prepared commands."""

    def __init__(self, registry: 'PluginRegistry', loader: 'BaseLoader',
                 store: 'ContextStore') -> None:
        """Initialize the preparer.

        Args:
            registry: Registry of plugin command types.
            loader: Loader supplying plugin property templates.
            store: Context store providing the effective context.
        """
        self.registry = registry
        self.loader = loader
        self.store = store

    async def prepare(self, plugin: str,
                      props: 'Mapping[str, RuntimeValue] | None' = None) -> 'BaseCommand':
        """Prepare a command of a plugin.

        Args:
            plugin: Plugin name.
            props: Step-level raw properties.

        Returns:
            A new command bound to the merged properties.

        Raises:
            UnknownPluginError: If the plugin is not registered.
            Any error raised by the loader while fetching the template.
        """
        command = self.registry.lookup(plugin)

        template = await self.loader.properties(plugin)
        context = self.store.effective()

        merged = {
            **context.render(dict(template or {})),
            **context.render(dict(props or {})),
        }
        logger.debug('prepared %s command with %r', plugin, merged)

        return command(merged)
