"""Step definitions.

A step is one unit of work within a runner: context bindings, a plugin
invocation with its properties, an optional output registration and
optional tests.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from qaflow.models import DescribedMixin, SchemaModel
from qaflow.names import Name  # noqa: TC001
from qaflow.values import RuntimeValue  # noqa: TC001

from .checks import TestSpec
from .registers import Registration


class Step(DescribedMixin, SchemaModel):
    """Executable step of a runner."""

    name: str = Field(
        default='',
        title='Step name',
        description='Label of the step used in reports.',
    )

    plugin: Name = Field(
        title='Plugin',
        description='Name of the registered plugin command the step invokes.',
    )

    props: dict[str, RuntimeValue] = Field(
        default_factory=dict,
        title='Command properties',
        description=(
            'Step-level properties merged over the plugin defaults. '
            'Strings may reference context variables as `${name}`.'
        ),
    )

    context: dict[str, RuntimeValue] = Field(
        default_factory=dict,
        title='Step context',
        description='Bindings merged into the step scope before the command is prepared.',
    )

    registration: dict[str, Registration] | None = Field(
        default=None,
        validation_alias=AliasChoices('register', 'registration'),
        title='Output registration',
        description=(
            'Mapping of new context variable names to result locations. '
            'A bare string is a path inside the `output` section.'
        ),
    )

    tests: list[TestSpec] | None = Field(
        default=None,
        title='Tests',
        description='Tests evaluated against the step result.',
    )

    skip_on_fail: bool = Field(
        default=False,
        validation_alias=AliasChoices('skipOnFail', 'skip_on_fail'),
        title='Continue on failure',
        description=(
            'If true, failing tests of this step do not abort the runner: '
            'the remaining steps are still executed.'
        ),
    )

    @field_validator('registration', mode='before')
    @classmethod
    def expand_register(cls, value: Any) -> Any:  # noqa: ANN401
        """Expand bare path shorthands of the registration statement."""
        if not isinstance(value, dict):
            return value

        return {
            key: Registration.coerce(item)
            for key, item in value.items()
        }
