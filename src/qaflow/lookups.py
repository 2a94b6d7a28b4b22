"""Nested value lookups and template rendering.

This module provides the generic accessor used wherever the engine has
to address a value inside a nested structure:

- Output registration resolves paths strictly and fails on the first
  missing segment.
- Assertions resolve paths tolerantly and treat missing values as `None`.
- Property templates embed `${path}` references that are rendered
  against the effective context.
"""

from collections.abc import Mapping, Sequence
from re import ASCII
from re import compile as regexp
from typing import TYPE_CHECKING

from qaflow.errors import PathResolutionError
from qaflow.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from re import Match

if TYPE_CHECKING:
    from qaflow.values import RuntimeValue

#: Pattern for a `${path}` reference inside a string.
TEMPLATE_PATTERN = regexp(r'\$\{\s*(?P<path>\w+(\.[\w\-]+)*)\s*\}', flags=ASCII)


class _Missing:
    """Marker for an unresolved lookup."""

    def __repr__(self) -> str:
        return '<missing>'

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class PathLookup:
    """Resolver for dotted-path access.

    Each segment of the path is either a mapping key, a sequence index
    (if the segment is numeric) or a public attribute of an object.
    """

    def __init__(self, path: str) -> None:
        """Initialize the resolver with a dotted path.

        Args:
            path: Dot-separated path describing how to traverse
                a nested structure.

        Raises:
            PathResolutionError: If the path is empty or contains an
                empty segment.
        """
        if not isinstance(path, str) or not path.strip():
            raise PathResolutionError(f'Invalid path {path!r}', path=path)

        self.path = path.strip()
        self.keys = tuple(self.path.split('.'))

        if not all(self.keys):
            raise PathResolutionError(f'Invalid path {path!r}', path=path)

    def __call__(self, value: 'RuntimeValue') -> 'RuntimeValue':
        """Resolve the path tolerantly."""
        return self.resolve(value)

    @staticmethod
    def step(value: 'RuntimeValue', key: str) -> 'RuntimeValue':
        """Apply a single path segment.

        Args:
            value: Current value.
            key: Path segment.

        Returns:
            The nested value or `MISSING`.
        """
        if isinstance(value, Mapping):
            return value.get(key, MISSING)

        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if key.isdecimal() and int(key) < len(value):
                return value[int(key)]
            return MISSING

        if value is None or isinstance(value, SCALARS) or key.startswith('_'):
            return MISSING

        found = getattr(value, key, MISSING)
        if callable(found):
            return MISSING

        return found

    def lookup(self, value: 'RuntimeValue') -> 'RuntimeValue':
        """Resolve the path, returning `MISSING` on the first gap."""
        for key in self.keys:
            value = self.step(value, key)
            if value is MISSING:
                return MISSING

        return value

    def resolve(self, value: 'RuntimeValue',
                default: 'RuntimeValue' = None) -> 'RuntimeValue':
        """Resolve the path tolerantly.

        Args:
            value: Root value.
            default: Value returned when the path is not resolved.

        Returns:
            The resolved value or the default.
        """
        found = self.lookup(value)
        if found is MISSING:
            return default

        return found

    def extract(self, value: 'RuntimeValue') -> 'RuntimeValue':
        """Resolve the path strictly.

        Args:
            value: Root value.

        Returns:
            The resolved value.

        Raises:
            PathResolutionError: If any segment of the path is missing.
        """
        for position, key in enumerate(self.keys):
            value = self.step(value, key)
            if value is MISSING:
                missing = '.'.join(self.keys[:position + 1])
                raise PathResolutionError(
                    f'Path {self.path!r} is not resolved at {missing!r}',
                    path=self.path,
                )

        return value


def lookup(value: 'RuntimeValue', path: str,
           default: 'RuntimeValue' = None) -> 'RuntimeValue':
    """Resolve a dotted path tolerantly.

    Invalid paths are treated as unresolved.
    """
    try:
        return PathLookup(path).resolve(value, default)
    except PathResolutionError:
        return default


def _render_string(template: str, context: Mapping[str, 'RuntimeValue']) -> 'RuntimeValue':
    """Substitute references inside a single string.

    A string consisting of exactly one reference is replaced by the raw
    referenced value, so non-string values keep their type. Embedded
    references are stringified. Unresolved references are kept verbatim.
    """
    if matched := TEMPLATE_PATTERN.fullmatch(template.strip()):
        value = PathLookup(matched.group('path')).lookup(context)
        return template if value is MISSING else value

    def replace(matched: 'Match[str]') -> str:
        value = PathLookup(matched.group('path')).lookup(context)
        return matched.group(0) if value is MISSING else f'{value}'

    return TEMPLATE_PATTERN.sub(replace, template)


def render(value: 'RuntimeValue', context: Mapping[str, 'RuntimeValue']) -> 'RuntimeValue':
    """Recursively render `${path}` references against a context.

    Args:
        value: A template: a string, a nested structure or any other
            value (returned unchanged).
        context: Effective context used to resolve references.

    Returns:
        The rendered value. Containers are always copied.
    """
    if isinstance(value, str):
        return _render_string(value, context)

    if isinstance(value, MAPPINGS):
        return {
            key: render(item, context)
            for key, item in value.items()
        }

    if isinstance(value, SEQUENCES):
        return [
            render(item, context)
            for item in value
        ]

    return value

