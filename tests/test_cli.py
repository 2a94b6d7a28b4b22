"""Tests for the command-line interface."""

from json import loads
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from qaflow.__main__ import cli

if TYPE_CHECKING:
    from pathlib import Path


ECHO_RUNNER = '''
steps:
  - name: say
    plugin: echo
    props:
      message: hello
    register:
      said: message
    tests:
      - type: equal
        actual: output.message
        expected: hello
  - name: repeat
    plugin: echo
    props:
      message: ${said} again
    tests:
      - type: equal
        actual: output.message
        expected: hello again
'''

FAILING_RUNNER = '''
steps:
  - plugin: echo
    props:
      message: hello
    tests:
      - type: equal
        actual: output.message
        expected: bye
'''


@pytest.fixture
def root(tmp_path: 'Path', monkeypatch: pytest.MonkeyPatch) -> 'Path':
    """Provide a definitions directory with passing and failing runners."""
    for name in ('ROOT', 'PLUGINS', 'SKIP', 'VERBOSITY'):
        monkeypatch.delenv(f'QAFLOW_{name}', raising=False)

    (tmp_path / 'runners' / 'smoke').mkdir(parents=True)
    (tmp_path / 'runners' / 'smoke' / 'echo.yml').write_text(ECHO_RUNNER)
    (tmp_path / 'runners' / 'broken').mkdir(parents=True)
    (tmp_path / 'runners' / 'broken' / 'bye.yml').write_text(FAILING_RUNNER)
    (tmp_path / 'commands' / 'util').mkdir(parents=True)
    (tmp_path / 'commands' / 'util' / 'noop.yml').write_text('plugin: empty\n')

    return tmp_path


def test_run_success(root: 'Path') -> None:
    """Exit successfully when every runner passes."""
    result = CliRunner().invoke(cli, ['run', '--root', f'{root}', 'smoke.echo'])

    assert result.exit_code == 0, result.output
    assert 'smoke.echo ✓' in result.output
    assert '✓ output.message, equal, hello again' in result.output


def test_run_failure(root: 'Path') -> None:
    """Exit with an error status when a runner fails."""
    result = CliRunner().invoke(cli, ['run', '--root', f'{root}', 'smoke', 'broken'])

    assert result.exit_code == 1
    assert 'smoke.echo ✓' in result.output
    assert 'broken.bye ✗' in result.output


def test_run_config_runners(root: 'Path') -> None:
    """Run the runners listed in the definitions config by default."""
    (root / 'config.yml').write_text('runners: [smoke.echo]\n')

    result = CliRunner().invoke(cli, ['run', '--root', f'{root}'])

    assert result.exit_code == 0, result.output
    assert 'broken.bye' not in result.output


def test_run_skip(root: 'Path') -> None:
    """Keep running failing steps when skipping, still failing the run."""
    result = CliRunner().invoke(cli, ['run', '--root', f'{root}', '--skip', 'broken.bye'])

    assert result.exit_code == 1


def test_run_unknown_plugin(root: 'Path') -> None:
    """Report initialization errors."""
    result = CliRunner().invoke(cli, ['run', '--root', f'{root}', '--plugin', 'nonexistent_plugin'])

    assert result.exit_code == 1
    assert "Plugin 'nonexistent_plugin' is not found" in result.output


def test_list(root: 'Path') -> None:
    """List runners and commands."""
    result = CliRunner().invoke(cli, ['list', '--root', f'{root}'])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        'runner broken.bye',
        'runner smoke.echo',
        'command util.noop',
    ]


@pytest.mark.parametrize('kind, fields', (
    pytest.param('runner', {'steps', 'title', 'description'}, id='runner'),
    pytest.param('command', {'plugin', 'props', 'title', 'description'}, id='command'),
))
def test_schema(kind: str, fields: set[str]) -> None:
    """Print the JSON Schema of definition files without identifiers."""
    result = CliRunner().invoke(cli, ['schema', '--kind', kind])

    assert result.exit_code == 0, result.output

    schema = loads(result.output)

    assert schema['title'] == f'qaflow {kind}'
    assert set(schema['properties']) == fields
