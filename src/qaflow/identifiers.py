"""Qualified identifiers of commands and runners.

An identifier addresses a definition inside a group and is serialized
as `group.name`. Identifiers are immutable, hashable and compared field
by field, which makes them safe to use as mapping keys.
"""

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError, field_validator

from qaflow.errors import MalformedIdentifierError
from qaflow.models import SchemaModel
from qaflow.names import Name, check_reserved  # noqa: TC001

if TYPE_CHECKING:
    from typing import Self

SEPARATOR = '.'


class Identifier(SchemaModel):
    """Qualified `group.name` identifier."""

    group: Name
    name: Name

    @field_validator('group', 'name')
    @classmethod
    def reject_reserved(cls, value: str) -> str:
        """Reject reserved words in both halves."""
        try:
            return check_reserved(value)
        except MalformedIdentifierError as base:
            raise ValueError(base.message) from base

    @classmethod
    def create(cls, group: str, name: str) -> 'Self':
        """Build an identifier from its halves.

        Args:
            group: Group name.
            name: Definition name.

        Returns:
            A validated identifier.

        Raises:
            MalformedIdentifierError: If either half is not a valid name.
        """
        try:
            return cls(group=group, name=name)
        except ValidationError as base:
            raise MalformedIdentifierError(
                f'{group}{SEPARATOR}{name} is an invalid identifier',
            ) from base

    @classmethod
    def parse(cls, text: 'str | Identifier') -> 'Identifier':
        """Parse a `group.name` token.

        Args:
            text: Identifier string. Already parsed identifiers are
                returned unchanged.

        Returns:
            The parsed identifier.

        Raises:
            MalformedIdentifierError: If the text does not consist of
                exactly two valid names separated by a dot.
        """
        if isinstance(text, Identifier):
            return text

        if not isinstance(text, str):
            raise MalformedIdentifierError(f'{text!r} is an invalid identifier')

        parts = text.strip().split(SEPARATOR)
        if len(parts) != 2:  # noqa: PLR2004
            raise MalformedIdentifierError(f'{text} is an invalid identifier')

        return cls.create(*parts)

    @classmethod
    def is_identifier(cls, value: Any) -> bool:  # noqa: ANN401
        """Check whether a value is a fully qualified identifier.

        Used to tell a bare group name apart from an identifier when
        expanding runner requests.
        """
        if isinstance(value, Identifier):
            return True

        try:
            cls.parse(value)
        except MalformedIdentifierError:
            return False

        return True

    def __str__(self) -> str:
        """Serialize as `group.name`."""
        return f'{self.group}{SEPARATOR}{self.name}'
