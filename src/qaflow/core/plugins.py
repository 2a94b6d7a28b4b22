"""Plugin registry.

This module resolves plugin names requested at initialization to
plugin command types. Resolution is fail-fast: a single plugin that can
not be resolved aborts initialization.

Plugins are looked up, in order, among explicitly provided command
types, the built-in commands and the `qaflow_plugins` entry point group.
"""

import logging
from inspect import isclass
from typing import TYPE_CHECKING
from warnings import warn

from qaflow.builtins.commands import BUILTIN_COMMANDS
from qaflow.errors import PluginLoadError, PluginWarning, UnknownPluginError
from qaflow.names import NAME_PATTERN
from qaflow.schema import BaseCommand

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from importlib.metadata import EntryPoint

logger = logging.getLogger(__name__)

#: Entry point group plugin distributions register their commands in.
ENTRYPOINT_GROUP = 'qaflow_plugins'


class PluginRegistry:
    """Mapping of plugin names to plugin command types."""

    def __init__(self, available: 'Mapping[str, type[BaseCommand]] | None' = None) -> None:
        """Initialize an empty registry.

        Args:
            available: Command types provided explicitly, resolved before
                built-ins and entry points.
        """
        self.available: dict[str, type[BaseCommand]] = dict(available or {})
        self.commands: dict[str, type[BaseCommand]] = {}

    @classmethod
    def from_names(cls, names: 'Iterable[str]',
                   available: 'Mapping[str, type[BaseCommand]] | None' = None) -> 'PluginRegistry':
        """Build a registry resolving every requested plugin.

        Args:
            names: Requested plugin names.
            available: Command types provided explicitly.

        Returns:
            The populated registry.

        Raises:
            PluginLoadError: If any plugin can not be resolved.
        """
        registry = cls(available)
        for name in names:
            registry.load(name)

        return registry

    def add_command(self, name: str, command: type[BaseCommand],
                    entrypoint: 'EntryPoint | None' = None) -> None:
        """Register a command type under a plugin name.

        Args:
            name: Plugin name.
            command: Command type.
            entrypoint: Entry point the command was loaded from, if any.

        Raises:
            PluginLoadError: If the object is not a command type.
        """
        if not isclass(command) or not issubclass(command, BaseCommand):
            raise PluginLoadError(
                f'Plugin {name!r} is not a command type',
                plugin=name,
                entrypoint=entrypoint,
            )

        if name in self.commands and self.commands[name] is not command:
            warn(
                f'Plugin {name!r} from {command.__module__!r} is shadowing an existing',
                category=PluginWarning,
                stacklevel=2,
            )

        self.commands[name] = command

    def load(self, name: str) -> type[BaseCommand]:
        """Resolve and register a single plugin.

        Args:
            name: Plugin name.

        Returns:
            The registered command type.

        Raises:
            PluginLoadError: If the plugin can not be resolved.
        """
        if not isinstance(name, str) or not NAME_PATTERN.match(name):
            raise PluginLoadError(f'{name!r} is an invalid plugin name', plugin=f'{name}')

        logger.debug('loading %s plugin', name)

        if name in self.available:
            self.add_command(name, self.available[name])
        elif name in BUILTIN_COMMANDS:
            self.add_command(name, BUILTIN_COMMANDS[name])
        else:
            self._load_entrypoint(name)

        logger.debug('plugin %s loaded successfully', name)

        return self.commands[name]

    def _load_entrypoint(self, name: str) -> None:
        """Load a plugin from the `qaflow_plugins` entry point group.

        Raises:
            PluginLoadError: If no entry point matches or loading fails.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        entrypoint = next((
            entrypoint
            for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP)
            if entrypoint.name == name
        ), None)
        if entrypoint is None:
            raise PluginLoadError(f'Plugin {name!r} is not found', plugin=name)

        try:
            command = entrypoint.load()

        except Exception as base:
            logger.debug('plugin %s failed to load', name, exc_info=True)
            raise PluginLoadError(
                f'Failed to load plugin {name!r}',
                plugin=name,
                entrypoint=entrypoint,
            ) from base

        self.add_command(name, command, entrypoint)

    def lookup(self, name: str) -> type[BaseCommand]:
        """Return the command type of a registered plugin.

        Raises:
            UnknownPluginError: If the plugin was never registered.
        """
        try:
            return self.commands[name]
        except KeyError as base:
            raise UnknownPluginError(name) from base

    def __contains__(self, name: object) -> bool:
        """Check whether a plugin is registered."""
        return name in self.commands

    @property
    def names(self) -> list[str]:
        """Names of the registered plugins in registration order."""
        return list(self.commands)
