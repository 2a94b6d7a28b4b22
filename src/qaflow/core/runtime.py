"""Engine runtime.

The runtime owns everything shared by runners of a process: the plugin
registry, the loader, the reporter and the context store. It is
initialized once and then drives runners sequentially.

Example:
    >>> runtime = Runtime()
    >>> await runtime.init({
    ...     'plugins': ['echo'],
    ...     'loader': FileLoader('definitions'),
    ...     'reporter': ConsoleReporter(),
    ... })
    >>> results = await runtime.start(['smoke', 'api.login'])
"""

import logging
from asyncio import gather
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError

from qaflow.context import ContextStore
from qaflow.errors import ConfigError, DefinitionNotFoundError, ErrorContext, RunnerAbortError
from qaflow.identifiers import Identifier
from qaflow.loaders import BaseLoader
from qaflow.models import SchemaModel
from qaflow.names import ALL_RUNNERS, validate_group
from qaflow.reporters import BaseReporter
from qaflow.schema import BaseCommand

from .executor import CommandExecutor
from .plugins import PluginRegistry
from .preparer import CommandPreparer
from .runner import RunnerExecutor

if TYPE_CHECKING:
    from collections.abc import Iterable

    from qaflow.reporters import RunnerResult
    from qaflow.schema import CommandResult
    from qaflow.values import RuntimeValue

logger = logging.getLogger(__name__)


class RuntimeConfig(SchemaModel):
    """Runtime initialization input."""

    plugins: list[str] = Field(
        min_length=1,
        title='Plugins',
        description='Names of the plugins steps may invoke.',
    )

    loader: BaseLoader = Field(
        title='Loader',
        description='Source of definitions, templates and the initial context.',
    )

    reporter: BaseReporter = Field(
        title='Reporter',
        description='Receiver of progress notifications.',
    )

    skip: bool = Field(
        default=False,
        title='Continue on failure',
        description='Continue runners on failed tests, as if every step declared `skipOnFail`.',
    )

    commands: dict[str, type[BaseCommand]] = Field(
        default_factory=dict,
        title='Command types',
        description='Plugin command types resolved before built-ins and entry points.',
    )


def _sanitize_config(config: Any) -> RuntimeConfig:  # noqa: ANN401
    """Validate runtime initialization input.

    Raises:
        ConfigError: If the input is not a valid configuration.
    """
    if isinstance(config, RuntimeConfig):
        return config

    if not isinstance(config, Mapping):
        raise ConfigError('Configuration should be a mapping')

    plugins = config.get('plugins')
    if not plugins:
        raise ConfigError('No plugins specified')
    if isinstance(plugins, str) or not all(isinstance(plugin, str) for plugin in plugins):
        raise ConfigError('plugins should be an array of strings')

    if config.get('loader') is None:
        raise ConfigError('Loader is required')
    if not isinstance(config['loader'], BaseLoader):
        raise ConfigError('loader should be of type BaseLoader')

    if config.get('reporter') is None:
        raise ConfigError('Reporter is required')
    if not isinstance(config['reporter'], BaseReporter):
        raise ConfigError('reporter should be of type BaseReporter')

    try:
        return RuntimeConfig.model_validate(config)
    except ValidationError as base:
        raise ConfigError(f'Invalid configuration: {base}') from base


class Runtime:
    """Top-level driver of runners."""

    def __init__(self) -> None:
        self.config: RuntimeConfig | None = None
        self.registry = PluginRegistry()
        self.store = ContextStore()
        self._commands: dict[str, list[Identifier]] = {}
        self._runners: dict[str, list[Identifier]] = {}

    @property
    def loader(self) -> BaseLoader:
        """Definition loader.

        Raises:
            ConfigError: If the runtime is not initialized.
        """
        if self.config is None:
            raise ConfigError('Runtime is not initialized')

        return self.config.loader

    @property
    def reporter(self) -> BaseReporter:
        """Progress reporter.

        Raises:
            ConfigError: If the runtime is not initialized.
        """
        if self.config is None:
            raise ConfigError('Runtime is not initialized')

        return self.config.reporter

    async def init(self, config: 'RuntimeConfig | Mapping[str, Any]') -> None:
        """Initialize the runtime.

        Validates the configuration, resolves every requested plugin,
        discovers command and runner groups and loads the initial global
        context.

        Args:
            config: Runtime configuration.

        Raises:
            ConfigError: If the configuration is invalid.
            PluginLoadError: If any plugin can not be resolved.
            MalformedIdentifierError: If the loader lists an invalid
                group or definition name.
            Any error raised by the loader.
        """
        config = _sanitize_config(config)
        logger.debug('continue on failure: %s', config.skip)

        registry = PluginRegistry.from_names(config.plugins, config.commands)
        logger.debug('using %s loader and %s reporter', config.loader.name, config.reporter.name)

        command_groups, runner_groups, context = await gather(
            config.loader.command_groups(),
            config.loader.runner_groups(),
            config.loader.context(),
        )

        for group in (*command_groups, *runner_groups):
            validate_group(group)

        command_names = await gather(*(config.loader.commands(group) for group in command_groups))
        runner_names = await gather(*(config.loader.runners(group) for group in runner_groups))

        self._commands = self._qualify(command_groups, command_names)
        self._runners = self._qualify(runner_groups, runner_names)

        self.config = config
        self.registry = registry
        self.store = ContextStore(context)

        logger.info(
            'initialized with %d plugins, %d commands and %d runners',
            len(registry.names),
            len(self.commands),
            len(self.runners),
        )

    @staticmethod
    def _qualify(groups: 'Iterable[str]',
                 names: 'Iterable[Iterable[str]]') -> dict[str, list[Identifier]]:
        """Build identifiers of listed definitions, grouped by group."""
        qualified = {}
        for group, items in zip(groups, names, strict=True):
            qualified[group] = [Identifier.create(group, name) for name in items]
            for identifier in qualified[group]:
                logger.debug('found %s', identifier)

        return qualified

    @property
    def runners(self) -> list[Identifier]:
        """Identifiers of every known runner, group by group."""
        return [
            identifier
            for identifiers in self._runners.values()
            for identifier in identifiers
        ]

    @property
    def commands(self) -> list[Identifier]:
        """Identifiers of every known command, group by group."""
        return [
            identifier
            for identifiers in self._commands.values()
            for identifier in identifiers
        ]

    def expand(self, requests: 'Iterable[str | Identifier]') -> list[Identifier]:
        """Expand runner requests into runner identifiers.

        Requests are `group.name` identifiers, bare group names standing
        for every runner of the group, or the `all` keyword standing for
        every known runner. Runners selected by `all` follow the
        explicitly requested ones. Duplicates are removed, first
        occurrence wins.

        Raises:
            MalformedIdentifierError: If a request is neither a valid
                identifier nor a valid group name.
            DefinitionNotFoundError: If a requested group is unknown.
        """
        expanded: list[Identifier] = []
        everything = False

        for request in requests:
            if isinstance(request, str):
                request = request.strip()

            if request == ALL_RUNNERS:
                everything = True
            elif Identifier.is_identifier(request):
                expanded.append(Identifier.parse(request))
            else:
                group = validate_group(request)
                if group not in self._runners:
                    raise DefinitionNotFoundError(f'Runner group {group!r} is not found')
                expanded.extend(self._runners[group])

        if everything:
            expanded.extend(self.runners)

        return list(dict.fromkeys(expanded))

    def _runner_executor(self) -> RunnerExecutor:
        return RunnerExecutor(
            self.loader,
            self.reporter,
            self.store,
            CommandPreparer(self.registry, self.loader, self.store),
            skip=self.config.skip if self.config else False,
        )

    async def start_runner(self, request: 'str | Identifier') -> 'RunnerResult':
        """Start a single runner.

        Raises:
            MalformedIdentifierError: If the request is not an identifier.
            Any error raised while preparing a step command.
        """
        identifier = Identifier.parse(request)
        logger.debug('starting runner %s', identifier)

        return await self._runner_executor().run(identifier)

    async def start(self, requests: 'Iterable[str | Identifier] | None' = None,
                    ) -> dict[str, 'RunnerResult']:
        """Run runners sequentially.

        If no runners are requested, the `runners` entry of the loader
        configuration is used, and every known runner if it is not set.
        A runner that fails does not stop the following ones.

        Args:
            requests: Runner identifiers, group names or `all`.

        Returns:
            Terminal result by runner identifier, in execution order.

        Raises:
            ConfigError: If the runtime is not initialized.
            MalformedIdentifierError: If a request is malformed.
            DefinitionNotFoundError: If a requested group is unknown.
        """
        loader, reporter = self.loader, self.reporter

        requests = list(requests or [])
        if not requests:
            config = await loader.config()
            requests = config.get('runners') or [ALL_RUNNERS]
            if isinstance(requests, str):
                requests = [requests]

        results: dict[str, RunnerResult] = {}
        for identifier in self.expand(requests):
            try:
                results[f'{identifier}'] = await self.start_runner(identifier)

            except Exception as error:
                logger.debug('runner %s can not start a step', identifier, exc_info=True)
                reporter.on_runner_error(identifier, error)
                results[f'{identifier}'] = RunnerAbortError(
                    f'Runner {identifier} aborted: {getattr(error, 'message', error)}',
                    runner=f'{identifier}',
                    cause=error,
                    context=ErrorContext(runner=f'{identifier}', error=error),
                )
                reporter.on_runner_done(identifier, results[f'{identifier}'])

        return results

    async def run_command(self, qualified_name: 'str | Identifier',
                          props: 'Mapping[str, RuntimeValue] | None' = None,
                          ) -> 'CommandResult':
        """Run a named command outside of any runner.

        The command definition properties are merged with the given
        properties, the given ones winning, and rendered against the
        effective context like step properties.

        Args:
            qualified_name: Identifier of the command definition.
            props: Properties overriding the definition ones.

        Returns:
            The command result.

        Raises:
            MalformedIdentifierError: If the name is not an identifier.
            DefinitionError: If the command can not be loaded.
            UnknownPluginError: If the command plugin is not registered.
            ExecutionError: If the command fails.
        """
        identifier = Identifier.parse(qualified_name)
        definition = await self.loader.command(identifier)

        preparer = CommandPreparer(self.registry, self.loader, self.store)
        command = await preparer.prepare(definition.plugin, {**definition.props, **(props or {})})

        return await CommandExecutor().execute(command)
