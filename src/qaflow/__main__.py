"""Command-line interface.

Runs runners from a definitions directory, lists known definitions and
prints the JSON Schema of definition files.
"""

import logging
from asyncio import run as run_async
from pathlib import Path
from typing import TYPE_CHECKING, Any

from click import Choice, ClickException, argument, echo, group, option
from click import Path as PathParam

from qaflow.core import Runtime
from qaflow.errors import QaflowError
from qaflow.jsonschema import KINDS, SchemaGenerator
from qaflow.loaders import FileLoader
from qaflow.reporters import ConsoleReporter
from qaflow.settings import RuntimeSettings

if TYPE_CHECKING:
    from qaflow.reporters import RunnerResult

#: Log levels by verbosity.
LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

LOG_FORMAT = '%(levelname)s %(name)s: %(message)s'

RootDirectory = PathParam(
    exists=True,
    file_okay=False,
    dir_okay=True,
    readable=True,
    path_type=Path,
)


def _configure_logging(verbosity: int) -> None:
    """Map the verbosity count to the log level of the process."""
    logging.basicConfig(
        level=LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)],
        format=LOG_FORMAT,
    )


def _make_settings(**overrides: Any) -> RuntimeSettings:  # noqa: ANN401
    """Read settings, applying only the options given on the command line."""
    return RuntimeSettings(**{
        key: value
        for key, value in overrides.items()
        if value not in (None, ())
    })


async def _make_runtime(settings: RuntimeSettings) -> Runtime:
    """Initialize a runtime reading definitions from the settings root.

    Plugins given explicitly (as options or `QAFLOW_PLUGINS`) take
    precedence over the `plugins` entry of the definitions config.
    """
    loader = FileLoader(settings.root)

    plugins = settings.plugins
    if 'plugins' not in settings.model_fields_set:
        config = await loader.config()
        plugins = config.get('plugins') or plugins

    runtime = Runtime()
    await runtime.init({
        'plugins': plugins,
        'loader': loader,
        'reporter': ConsoleReporter(settings.verbosity),
        'skip': settings.skip,
    })

    return runtime


async def _run(settings: RuntimeSettings, runners: list[str]) -> dict[str, 'RunnerResult']:
    runtime = await _make_runtime(settings)
    return await runtime.start(runners)


@group(help='Declarative test and workflow runner.')
def cli() -> None:
    """Root CLI group for qaflow tools."""
    return None


@cli.command(
    name='run',
    help=(
        'Run runners. RUNNERS are group.name identifiers, group names or '
        '"all". Without RUNNERS the runners listed in the definitions '
        'config are run, or every runner if there are none.'
    ),
)
@option('-r', '--root', type=RootDirectory, help='Definitions root directory.')
@option('-p', '--plugin', 'plugins', multiple=True, help='Plugin to enable (repeatable).')
@option('--skip/--no-skip', default=None, help='Continue runners on failed tests.')
@option('-v', '--verbose', 'verbosity', count=True, help='Increase output detail.')
@argument('runners', nargs=-1)
def run_runners(root: Path | None, plugins: tuple[str, ...], skip: bool | None,
                verbosity: int, runners: tuple[str, ...]) -> None:
    """Run runners and exit non-zero if any of them failed."""
    settings = _make_settings(
        root=root,
        plugins=list(plugins) or None,
        skip=skip,
        verbosity=verbosity or None,
    )
    _configure_logging(settings.verbosity)

    try:
        results = run_async(_run(settings, list(runners)))
    except QaflowError as error:
        raise ClickException(f'{error}') from error

    if any(isinstance(result, Exception) for result in results.values()):
        raise SystemExit(1)


@cli.command(name='list', help='List known runners and commands.')
@option('-r', '--root', type=RootDirectory, help='Definitions root directory.')
@option('-p', '--plugin', 'plugins', multiple=True, help='Plugin to enable (repeatable).')
def list_definitions(root: Path | None, plugins: tuple[str, ...]) -> None:
    """Print runner and command identifiers, one per line."""
    settings = _make_settings(root=root, plugins=list(plugins) or None)

    try:
        runtime = run_async(_make_runtime(settings))
    except QaflowError as error:
        raise ClickException(f'{error}') from error

    for identifier in runtime.runners:
        echo(f'runner {identifier}')
    for identifier in runtime.commands:
        echo(f'command {identifier}')


@cli.command(name='schema', help='Print the JSON Schema of definition files.')
@option('-k', '--kind', type=Choice(sorted(KINDS)), default='runner', show_default=True,
        help='Definition kind.')
def print_schema(kind: str) -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema(kind))


if __name__ == '__main__':
    cli()
