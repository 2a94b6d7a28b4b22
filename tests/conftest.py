"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING

import pytest

from qaflow.context import ContextStore
from qaflow.core import CommandPreparer, PluginRegistry, RunnerExecutor
from qaflow.loaders import MemoryLoader
from qaflow.reporters import BaseReporter
from tests.examples.commands import EXAMPLE_COMMANDS, RecordCommand

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


@pytest.fixture(autouse=True)
def clear_records() -> 'Iterator[None]':
    """Forget properties recorded by the example record command."""
    RecordCommand.calls.clear()
    yield
    RecordCommand.calls.clear()


@pytest.fixture
def store() -> ContextStore:
    """Provide an empty context store."""
    return ContextStore()


@pytest.fixture
def registry() -> PluginRegistry:
    """Provide a registry with the example and built-in commands."""
    return PluginRegistry.from_names(
        [*EXAMPLE_COMMANDS, 'echo', 'empty'],
        EXAMPLE_COMMANDS,
    )


@pytest.fixture
def reporter(mocker: 'MockerFixture') -> 'MockType':
    """Provide a reporter mock recording every notification."""
    return mocker.Mock(spec=BaseReporter)


@pytest.fixture
def make_executor(registry: PluginRegistry, store: ContextStore,
                  reporter: 'MockType') -> 'Callable[..., RunnerExecutor]':
    """Provide a factory of runner executors over in-memory definitions.

    The factory accepts the keyword arguments of `MemoryLoader` and an
    optional `skip` flag.
    """
    def make(*, skip: bool = False, **definitions: dict) -> RunnerExecutor:
        loader = MemoryLoader(**definitions)
        return RunnerExecutor(
            loader,
            reporter,
            store,
            CommandPreparer(registry, loader, store),
            skip=skip,
        )

    return make


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of plugin commands in the `qaflow_plugins` entry point
    group.

    The returned factory allows configuring:
    - successfully loadable commands, keyed by plugin name,
    - or an exception raised during plugin loading,
    - or an empty entry point list.
    """
    def patch(raises: Exception | None = None, **commands: object) -> 'MockType':
        """Patch `entry_points` with a controlled plugin configuration.

        Args:
            raises: Exception to raise when `EntryPoint.load()` is called.
                Used to simulate plugin load failures.
            commands: Objects to be returned by `EntryPoint.load()`, by
                entry point name. If empty, no entry points are
                registered.

        Returns:
            A mock patch object produced by `mocker.patch` that replaces
            `importlib.metadata.entry_points` for the duration of the test.
        """
        entrypoints = []
        for name, command in commands.items():
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'qaflow_plugins'
            ep.name = name
            ep.value = f'tests.examples.commands:{name}'
            ep.load.return_value = command
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
