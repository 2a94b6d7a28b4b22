"""File-backed definition loader.

Definitions are read from a directory tree::

    <root>/config.yml
    <root>/context.yml
    <root>/properties/<plugin>.yml
    <root>/commands/<group>/<name>.yml
    <root>/runners/<group>/<name>.yml

YAML (`.yml`, `.yaml`) and JSON (`.json`) files are accepted; both are
parsed with the YAML safe loader. Files whose names are not valid
definition names are ignored by listings.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from yaml import YAMLError, safe_load
from yaml.error import MarkedYAMLError

from qaflow.errors import DefinitionError, DefinitionNotFoundError, MalformedIdentifierError
from qaflow.identifiers import Identifier
from qaflow.names import validate_filename

from .base import BaseLoader

if TYPE_CHECKING:
    from qaflow.schema import CommandDefinition, RunnerDefinition
    from qaflow.values import RuntimeValue

logger = logging.getLogger(__name__)

#: Accepted definition file suffixes, in lookup order.
SUFFIXES = ('.yml', '.yaml', '.json')

COMMANDS_DIR = 'commands'
RUNNERS_DIR = 'runners'
PROPERTIES_DIR = 'properties'

CONFIG_FILE = 'config'
CONTEXT_FILE = 'context'


class FileLoader(BaseLoader):
    """Loader reading definitions from a directory."""

    name = 'file'

    def __init__(self, root: str | Path = '.') -> None:
        """Initialize the loader.

        Args:
            root: Definitions root directory.
        """
        self.root = Path(root)

    async def command_groups(self) -> list[str]:
        return self._list_groups(self.root / COMMANDS_DIR)

    async def runner_groups(self) -> list[str]:
        return self._list_groups(self.root / RUNNERS_DIR)

    async def commands(self, group: str) -> list[str]:
        return self._list_names(self.root / COMMANDS_DIR / group)

    async def runners(self, group: str) -> list[str]:
        return self._list_names(self.root / RUNNERS_DIR / group)

    async def command(self, identifier: 'Identifier | str') -> 'CommandDefinition':
        identifier = Identifier.parse(identifier)
        path = self._find(self.root / COMMANDS_DIR / identifier.group, identifier.name)
        if path is None:
            raise DefinitionNotFoundError(f'Command {identifier} is not found')

        return self.validate_command(identifier, self._read(path), source=f'{path}')

    async def runner(self, identifier: 'Identifier | str') -> 'RunnerDefinition':
        identifier = Identifier.parse(identifier)
        path = self._find(self.root / RUNNERS_DIR / identifier.group, identifier.name)
        if path is None:
            raise DefinitionNotFoundError(f'Runner {identifier} is not found')

        return self.validate_runner(identifier, self._read(path), source=f'{path}')

    async def properties(self, plugin: str) -> dict[str, 'RuntimeValue']:
        return self._read_mapping(self.root / PROPERTIES_DIR, plugin)

    async def context(self) -> dict[str, 'RuntimeValue']:
        return self._read_mapping(self.root, CONTEXT_FILE)

    async def config(self) -> dict[str, 'RuntimeValue']:
        return self._read_mapping(self.root, CONFIG_FILE)

    @staticmethod
    def _list_groups(directory: Path) -> list[str]:
        """List subdirectories of a definitions directory."""
        if not directory.is_dir():
            return []

        return sorted(
            path.name
            for path in directory.iterdir()
            if path.is_dir() and not path.name.startswith('.')
        )

    @staticmethod
    def _list_names(directory: Path) -> list[str]:
        """List definition names inside a group directory."""
        if not directory.is_dir():
            return []

        names = set()
        for path in directory.iterdir():
            if not path.is_file() or path.suffix not in SUFFIXES:
                continue
            try:
                names.add(validate_filename(path.name))
            except MalformedIdentifierError:
                logger.debug('ignoring definition file %s', path)

        return sorted(names)

    @staticmethod
    def _find(directory: Path, name: str) -> Path | None:
        """Find the definition file of a name."""
        return next((
            path
            for suffix in SUFFIXES
            if (path := directory / f'{name}{suffix}').is_file()
        ), None)

    @staticmethod
    def _read(path: Path) -> Any:  # noqa: ANN401
        """Parse a definition file.

        Raises:
            DefinitionError: If the file can not be parsed.
        """
        logger.debug('reading %s', path)

        try:
            with path.open('rt', encoding='utf-8') as content:
                return safe_load(content)

        except MarkedYAMLError as base:
            raise DefinitionError.from_yaml_error(base, source=f'{path}') from base

        except (OSError, YAMLError) as base:
            raise DefinitionError(f'Can not read {path}: {base}') from base

    def _read_mapping(self, directory: Path, name: str) -> dict[str, 'RuntimeValue']:
        """Parse an optional mapping file, empty if it does not exist.

        Raises:
            DefinitionError: If the file does not contain a mapping.
        """
        path = self._find(directory, name)
        if path is None:
            return {}

        data = self._read(path)
        if data is None:
            return {}

        if not isinstance(data, dict):
            raise DefinitionError(
                f'{path} must contain a mapping',
                context={'source': f'{path}', 'element': data},
            )

        return data

    def __repr__(self) -> str:
        """Debug representation."""
        return f'{type(self).__name__}(root={self.root.as_posix()!r})'
