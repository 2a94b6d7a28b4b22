"""Name primitive types and validation rules.

This module defines the name patterns used to address command groups,
runner groups, commands, runners and plugins, together with the list of
reserved words that can never be used as a name.

The rules defined here form part of the definition format contract and
are relied upon by identifiers, loaders and the plugin registry.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

from qaflow.errors import MalformedIdentifierError

#: Base pattern for all names: ASCII word characters only.
_NAME_PATTERN = r'[A-Za-z0-9_]+'

#: Compiled pattern for a single group or definition name.
NAME_PATTERN = regexp(rf'^{_NAME_PATTERN}$', flags=ASCII)

#: Compiled pattern for definition file names (the optional suffix is
#: stripped by the loader before validation).
FILENAME_PATTERN = regexp(rf'^(?P<name>{_NAME_PATTERN})(\.(ya?ml|json))?$', flags=ASCII)

#: Names that collide with loader-level sections.
RESERVED_WORDS = frozenset({
    'properties',
})

#: Keyword selecting every known runner.
ALL_RUNNERS = 'all'


Name = Annotated[
    str, Field(
        pattern=rf'^{_NAME_PATTERN}$',
        title='Name',
        description=(
            'Name of a group, command, runner or plugin. '
            'Names are limited to ASCII letters, digits, and underscores.'
        ),
        examples=[
            'group1',
            'http',
        ],
    ),
]


def check_reserved(name: str) -> str:
    """Reject reserved words.

    Args:
        name: Candidate name.

    Returns:
        The name unchanged.

    Raises:
        MalformedIdentifierError: If the name is a reserved word.
    """
    if name in RESERVED_WORDS:
        raise MalformedIdentifierError(f'{name!r} is a reserved word')

    return name


def validate_name(name: str) -> str:
    """Validate a single definition name.

    Args:
        name: Candidate name.

    Returns:
        The name unchanged.

    Raises:
        MalformedIdentifierError: If the name is reserved or contains
            characters other than word characters.
    """
    check_reserved(name)

    if not isinstance(name, str) or not NAME_PATTERN.match(name):
        raise MalformedIdentifierError(f'{name!r} is an invalid name')

    return name


def validate_group(name: str) -> str:
    """Validate a group name as listed by a loader."""
    return validate_name(name)


def validate_filename(filename: str) -> str:
    """Validate a definition file name and strip its suffix.

    Args:
        filename: File name, with or without a supported suffix.

    Returns:
        The definition name without suffix.

    Raises:
        MalformedIdentifierError: If the file name is not valid.
    """
    if not (matched := FILENAME_PATTERN.match(filename)):
        raise MalformedIdentifierError(f'{filename!r} is an invalid name')

    return check_reserved(matched.group('name'))
