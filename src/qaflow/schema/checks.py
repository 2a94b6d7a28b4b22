"""Test specifications and test results.

A step may declare a list of tests. Each test names an assertion kind,
the path of the actual value, the expected literal and an optional
custom failure message.
"""

from pydantic import Field

from qaflow.models import SchemaModel
from qaflow.values import Value  # noqa: TC001


class TestSpec(SchemaModel):
    """Declarative test of a step result."""

    __test__ = False

    type: str = Field(
        title='Assertion kind',
        description='Name of the assertion, for example `equal` or `isAbove`.',
        examples=['equal', 'deepEqual', 'match'],
    )

    actual: str = Field(
        title='Actual value path',
        description=(
            'Dotted path of the checked value. The path is resolved against '
            'the step result overlaid on the effective context, so both '
            '`output.body.id` and context variables can be addressed.'
        ),
    )

    expected: Value = Field(
        default=None,
        title='Expected value',
        description='Literal the actual value is compared with.',
    )

    message: str | None = Field(
        default=None,
        title='Failure message',
        description=(
            'Custom failure message. If it is a path resolving to a string '
            'in the result output section, the resolved string is used.'
        ),
    )

    @property
    def display_name(self) -> str:
        """Human readable name of the test."""
        return f'{self.actual}, {self.type}, {self.expected}'


class TestResult(SchemaModel):
    """Outcome of a single test."""

    __test__ = False

    name: str
    error: Exception | None = None

    @property
    def passed(self) -> bool:
        """Whether the test passed."""
        return self.error is None
