"""Output registration statements.

A registration statement maps new context variable names to locations
inside a command result. Each binding names a result section, a dotted
path inside that section and the context scope to write into.
"""

from typing import Any

from pydantic import Field, field_validator

from qaflow.context import Scope
from qaflow.errors import ConfigError
from qaflow.models import SchemaModel

DEFAULT_SECTION = 'output'


class Registration(SchemaModel):
    """A single registration binding."""

    section: str = Field(
        default=DEFAULT_SECTION,
        title='Result section',
        description='Top-level key of the command result to read from.',
    )

    path: str | None = Field(
        default=None,
        title='Value path',
        description=(
            'Dot-delimited path of the value inside the section. '
            'Mapping keys and sequence indices are supported.'
        ),
    )

    scope: Scope = Field(
        default=Scope.GLOBAL,
        title='Context scope',
        description='Scope the registered value is written into.',
    )

    @field_validator('scope', mode='before')
    @classmethod
    def parse_scope(cls, value: Any) -> Scope:  # noqa: ANN401
        """Accept scope names in any letter case."""
        try:
            return Scope.parse(value)
        except ConfigError as base:
            raise ValueError(base.message) from base

    @classmethod
    def coerce(cls, value: Any) -> Any:  # noqa: ANN401
        """Expand the bare path shorthand into a binding mapping."""
        if isinstance(value, str):
            return {'path': value}

        return value


#: Mapping of new context variable names to registration bindings.
type RegistrationStatement = dict[str, Registration]
