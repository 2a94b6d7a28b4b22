"""Tests for runtime initialization and the runner driver."""

from typing import TYPE_CHECKING, Any

import pytest

from qaflow.core import SUCCESS, Runtime
from qaflow.errors import (
    ConfigError,
    DefinitionNotFoundError,
    MalformedIdentifierError,
    PluginLoadError,
    RunnerAbortError,
    UnknownPluginError,
)
from qaflow.identifiers import Identifier
from qaflow.loaders import MemoryLoader
from qaflow.reporters import NullReporter
from tests.examples.commands import EXAMPLE_COMMANDS, RecordCommand

if TYPE_CHECKING:
    from pytest_mock import MockType

RUNNERS = {
    'smoke': {
        'ping': {'steps': [{'plugin': 'record', 'props': {'runner': 'smoke.ping'}}]},
        'login': {'steps': [{'plugin': 'record', 'props': {'runner': 'smoke.login'}}]},
    },
    'nightly': {
        'report': {'steps': [{'plugin': 'record', 'props': {'runner': 'nightly.report'}}]},
    },
}

COMMANDS = {
    'api': {
        'get_user': {'plugin': 'response', 'props': {'url': '/users/${user}', 'status': 200}},
    },
}


def identifiers(*names: str) -> list[Identifier]:
    return [Identifier.parse(name) for name in names]


def started() -> list[str]:
    """Runners started so far, in start order."""
    return [call['runner'] for call in RecordCommand.calls]


async def make_runtime(reporter: Any = None, **definitions: Any) -> Runtime:  # noqa: ANN401
    """Initialize a runtime over in-memory definitions."""
    definitions.setdefault('runners', RUNNERS)
    definitions.setdefault('commands', COMMANDS)

    runtime = Runtime()
    await runtime.init({
        'plugins': list(EXAMPLE_COMMANDS),
        'commands': EXAMPLE_COMMANDS,
        'loader': MemoryLoader(**definitions),
        'reporter': reporter or NullReporter(),
    })

    return runtime


@pytest.mark.parametrize('config, message', (
    pytest.param({}, 'No plugins specified', id='no plugins'),
    pytest.param({'plugins': []}, 'No plugins specified', id='empty plugins'),
    pytest.param({'plugins': 'echo'}, 'plugins should be an array of strings', id='string plugins'),
    pytest.param({'plugins': ['echo', 1]}, 'plugins should be an array of strings', id='non-string'),
    pytest.param({'plugins': ['echo']}, 'Loader is required', id='no loader'),
    pytest.param(
        {'plugins': ['echo'], 'loader': object()},
        'loader should be of type BaseLoader',
        id='invalid loader',
    ),
    pytest.param(
        {'plugins': ['echo'], 'loader': MemoryLoader()},
        'Reporter is required',
        id='no reporter',
    ),
    pytest.param(
        {'plugins': ['echo'], 'loader': MemoryLoader(), 'reporter': 'console'},
        'reporter should be of type BaseReporter',
        id='invalid reporter',
    ),
    pytest.param(
        {'plugins': ['echo'], 'loader': MemoryLoader(), 'reporter': NullReporter(), 'retries': 3},
        'Invalid configuration',
        id='unknown option',
    ),
))
@pytest.mark.asyncio
async def test_invalid_config(config: dict[str, Any], message: str) -> None:
    """Reject invalid initialization input."""
    with pytest.raises(ConfigError, match=rf'^{message}'):
        await Runtime().init(config)


@pytest.mark.asyncio
async def test_init_unknown_plugin() -> None:
    """Reject startup when a plugin can not be resolved."""
    with pytest.raises(PluginLoadError):
        await Runtime().init({
            'plugins': ['echo', 'nonexistent_plugin'],
            'loader': MemoryLoader(),
            'reporter': NullReporter(),
        })


@pytest.mark.asyncio
async def test_init_discovers_definitions() -> None:
    """List every runner and command at initialization."""
    runtime = await make_runtime(context={'user': 'alice'})

    assert runtime.runners == identifiers('smoke.ping', 'smoke.login', 'nightly.report')
    assert runtime.commands == identifiers('api.get_user')
    assert runtime.store.effective() == {'user': 'alice'}


@pytest.mark.parametrize('group', ('group.1', 'properties'))
@pytest.mark.asyncio
async def test_init_rejects_invalid_groups(group: str) -> None:
    """Reject groups with dots or reserved names."""
    with pytest.raises(MalformedIdentifierError):
        await make_runtime(runners={group: {}})


@pytest.mark.asyncio
async def test_init_rejects_invalid_names() -> None:
    """Reject definition names that are not valid names."""
    with pytest.raises(MalformedIdentifierError):
        await make_runtime(commands={'api': {'get-user': {}}})


@pytest.mark.parametrize('requests, expected', (
    pytest.param(['smoke.login'], ['smoke.login'], id='identifier'),
    pytest.param(['smoke'], ['smoke.ping', 'smoke.login'], id='group'),
    pytest.param(
        ['all', 'nightly.report'],
        ['nightly.report', 'smoke.ping', 'smoke.login'],
        id='all after explicit',
    ),
    pytest.param(
        ['smoke.login', 'smoke', 'smoke.login'],
        ['smoke.login', 'smoke.ping'],
        id='duplicates',
    ),
    pytest.param(
        [' all ', ' smoke.ping'],
        ['smoke.ping', 'smoke.login', 'nightly.report'],
        id='whitespace',
    ),
))
@pytest.mark.asyncio
async def test_expand_requests(requests: list[str], expected: list[str]) -> None:
    """Expand groups and the `all` keyword into identifiers."""
    runtime = await make_runtime()

    assert runtime.expand(requests) == identifiers(*expected)


@pytest.mark.asyncio
async def test_expand_unknown_group() -> None:
    """Reject requests for unknown groups."""
    runtime = await make_runtime()

    with pytest.raises(DefinitionNotFoundError, match=r"^Runner group 'weekly' is not found$"):
        runtime.expand(['weekly'])


@pytest.mark.asyncio
async def test_start_sequentially() -> None:
    """Run requested runners in order and return results by identifier."""
    runtime = await make_runtime()

    results = await runtime.start(['nightly.report', 'smoke'])

    assert results == {
        'nightly.report': SUCCESS,
        'smoke.ping': SUCCESS,
        'smoke.login': SUCCESS,
    }
    assert started() == ['nightly.report', 'smoke.ping', 'smoke.login']


@pytest.mark.asyncio
async def test_start_configured_runners() -> None:
    """Start the runners listed in the loader configuration by default."""
    runtime = await make_runtime(config={'runners': ['smoke.login']})

    results = await runtime.start()

    assert list(results) == ['smoke.login']


@pytest.mark.asyncio
async def test_start_configured_runner_string() -> None:
    """Accept a single configured runner request given as a string."""
    runtime = await make_runtime(config={'runners': 'smoke'})

    results = await runtime.start()

    assert list(results) == ['smoke.ping', 'smoke.login']


@pytest.mark.asyncio
async def test_start_everything_by_default() -> None:
    """Start every runner when nothing is requested or configured."""
    runtime = await make_runtime()

    results = await runtime.start([])

    assert list(results) == ['smoke.ping', 'smoke.login', 'nightly.report']


@pytest.mark.asyncio
async def test_start_continues_after_failures(reporter: 'MockType') -> None:
    """Continue with remaining runners when one aborts or can not start."""
    runtime = await make_runtime(reporter, runners={
        'smoke': {
            'broken': {'steps': [{'plugin': 'http'}]},
            'failing': {'steps': [{'plugin': 'failing'}]},
            'ping': {'steps': [{'plugin': 'record', 'props': {'runner': 'smoke.ping'}}]},
        },
    })

    results = await runtime.start(['smoke'])

    assert isinstance(results['smoke.broken'], RunnerAbortError)
    assert isinstance(results['smoke.broken'].cause, UnknownPluginError)
    assert isinstance(results['smoke.failing'], RunnerAbortError)
    assert results['smoke.ping'] == SUCCESS
    assert started() == ['smoke.ping']
    assert reporter.on_runner_done.call_count == 3


@pytest.mark.asyncio
async def test_start_before_init() -> None:
    """Refuse to start an uninitialized runtime."""
    with pytest.raises(ConfigError, match=r'^Runtime is not initialized$'):
        await Runtime().start(['smoke.ping'])


@pytest.mark.asyncio
async def test_global_context_shared_between_runners() -> None:
    """Keep global registrations across runners of a batch."""
    runtime = await make_runtime(runners={
        'flow': {
            'a_login': {'steps': [{
                'plugin': 'response',
                'props': {'body': {'token': 't-1'}},
                'register': {'token': 'body.token'},
            }]},
            'b_use': {'steps': [{'plugin': 'record', 'props': {'runner': '${token}'}}]},
        },
    })

    await runtime.start(['flow.a_login', 'flow.b_use'])

    assert started() == ['t-1']


@pytest.mark.asyncio
async def test_run_command() -> None:
    """Run a named command outside of any runner."""
    runtime = await make_runtime(context={'user': 'alice'})

    result = await runtime.run_command('api.get_user', {'status': 404})

    assert result['output'] == {'status': 404, 'body': None, 'url': '/users/alice'}


@pytest.mark.asyncio
async def test_run_missing_command() -> None:
    """Propagate loader failures of direct command runs."""
    runtime = await make_runtime()

    with pytest.raises(DefinitionNotFoundError):
        await runtime.run_command('api.delete_user')
