"""Tests for plugin resolution."""

from typing import TYPE_CHECKING

import pytest

from qaflow.builtins.commands import EchoCommand, EmptyCommand
from qaflow.core import PluginRegistry
from qaflow.errors import PluginLoadError, PluginWarning, UnknownPluginError
from tests.examples.commands import NotACommand, RecordCommand, ResponseCommand

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockType


def test_builtin_plugins(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Resolve built-in commands without entry points."""
    patched = patch_entrypoints()

    registry = PluginRegistry.from_names(['echo', 'empty'])

    assert registry.names == ['echo', 'empty']
    assert registry.lookup('echo') is EchoCommand
    assert registry.lookup('empty') is EmptyCommand
    patched.assert_not_called()


def test_explicit_commands_win() -> None:
    """Resolve explicitly provided command types before built-ins."""
    registry = PluginRegistry.from_names(['echo'], {'echo': RecordCommand})

    assert registry.lookup('echo') is RecordCommand


def test_entrypoint_plugins(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Resolve plugins from the `qaflow_plugins` entry point group."""
    patch_entrypoints(record=RecordCommand, response=ResponseCommand)

    registry = PluginRegistry.from_names(['response', 'record'])

    assert registry.names == ['response', 'record']
    assert registry.lookup('response') is ResponseCommand
    assert 'record' in registry


def test_missing_plugin(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Fail fast on plugins that can not be found."""
    patch_entrypoints(record=RecordCommand)

    with pytest.raises(PluginLoadError, match=r"^Plugin 'http' is not found$") as error:
        PluginRegistry.from_names(['echo', 'http', 'record'])

    assert error.value.plugin == 'http'


def test_failing_entrypoint(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Fail fast on entry points that can not be loaded."""
    patch_entrypoints(raises=ImportError('No module named http'), http=None)

    with pytest.raises(PluginLoadError, match=r"^Failed to load plugin 'http'$") as error:
        PluginRegistry.from_names(['http'])

    assert error.value.entrypoint is not None
    assert isinstance(error.value.__cause__, ImportError)


@pytest.mark.parametrize('command', (
    pytest.param(NotACommand, id='class'),
    pytest.param(RecordCommand({}), id='instance'),
    pytest.param(None, id='none'),
))
def test_not_a_command(patch_entrypoints: 'Callable[..., MockType]', command: object) -> None:
    """Reject entry points that do not load a command type."""
    patch_entrypoints(http=command)

    with pytest.raises(PluginLoadError, match=r"^Plugin 'http' is not a command type$"):
        PluginRegistry.from_names(['http'])


@pytest.mark.parametrize('name', ('', 'http.client', 42))
def test_invalid_plugin_name(name: object) -> None:
    """Reject plugin names that are not valid names."""
    with pytest.raises(PluginLoadError, match=r'is an invalid plugin name$'):
        PluginRegistry.from_names([name])


def test_shadowing_plugin() -> None:
    """Warn when a plugin name is registered with another command."""
    registry = PluginRegistry.from_names(['echo'])

    with pytest.warns(PluginWarning, match=r"^Plugin 'echo' from 'tests.examples.commands'"):
        registry.add_command('echo', RecordCommand)

    assert registry.lookup('echo') is RecordCommand


def test_lookup_unknown_plugin() -> None:
    """Reject lookups of plugins never registered."""
    registry = PluginRegistry.from_names(['echo'])

    with pytest.raises(UnknownPluginError, match=r"^'record' unsupported plugin$"):
        registry.lookup('record')
