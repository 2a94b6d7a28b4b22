"""Built-in assertion kinds.

This module defines the fixed vocabulary of assertions a test may name
in its `type` field. Every assertion is a predicate over the actual and
the expected value plus a message template used when the predicate
does not hold. Negated kinds are derived from their positive
counterparts.

The vocabulary is extensible: the assertion evaluator accepts any
mapping of names to `Assertion` objects.
"""

from collections.abc import Callable, Mapping, Sequence
from contextlib import suppress
from datetime import date, datetime, timedelta
from re import error as RegexError
from re import search

from pydantic import Field

from qaflow.errors import AssertionFailure
from qaflow.models import SchemaModel
from qaflow.values import MAPPINGS, SEQUENCES, RuntimeValue, is_number

#: A predicate receives the actual and the expected values and returns
#: True if the assertion holds.
type AssertionPredicate = Callable[[RuntimeValue, RuntimeValue], bool]


class Assertion(SchemaModel):
    """Named assertion backed by a predicate."""

    name: str = Field(
        title='Assertion kind',
        description='Name used by tests to select the assertion.',
    )

    predicate: AssertionPredicate = Field(
        title='Predicate',
        description='Callable returning True if the assertion holds.',
    )

    template: str = Field(
        title='Failure message template',
        description=(
            'Default failure message, formatted with `actual` and '
            '`expected` representations.'
        ),
    )

    def __call__(self, actual: 'RuntimeValue', expected: 'RuntimeValue',
                 message: str | None = None) -> None:
        """Check the assertion.

        Args:
            actual: Actual value.
            expected: Expected value.
            message: Optional custom failure message.

        Raises:
            AssertionFailure: If the predicate does not hold or can not
                compare the values.
        """
        try:
            holds = self.predicate(actual, expected)
        except (TypeError, ValueError, RegexError) as base:
            raise AssertionFailure(message or f'{self.name}: {base}') from base

        if not holds:
            raise AssertionFailure(message or self.template.format(
                actual=repr(actual),
                expected=repr(expected),
            ))

    def negate(self, name: str, template: str) -> 'Assertion':
        """Build the negated assertion."""
        predicate = self.predicate

        return Assertion(
            name=name,
            predicate=lambda actual, expected: not predicate(actual, expected),
            template=template,
        )


def _loose_equal(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Compare values, treating numeric strings as numbers."""
    if actual == expected:
        return True

    for left, right in ((actual, expected), (expected, actual)):
        if isinstance(left, str) and is_number(right):
            with suppress(ValueError):
                return float(left) == right

    return False


def _strict_equal(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Compare values requiring the same kind of value."""
    if is_number(actual) and is_number(expected):
        return actual == expected

    return type(actual) is type(expected) and actual == expected


def _deep_equal(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Recursively compare containers, ignoring sequence container types."""
    if isinstance(expected, MAPPINGS):
        return (
            isinstance(actual, Mapping)
            and actual.keys() == expected.keys()
            and all(_deep_equal(actual[key], value) for key, value in expected.items())
        )

    if isinstance(expected, SEQUENCES) and not isinstance(expected, set):
        return (
            isinstance(actual, Sequence)
            and not isinstance(actual, (str, bytes))
            and len(actual) == len(expected)
            and all(_deep_equal(left, right) for left, right in zip(actual, expected, strict=True))
        )

    return _strict_equal(actual, expected)


def _include(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Check membership of an element, a substring or a sub-mapping."""
    if isinstance(actual, str):
        return isinstance(expected, str) and expected in actual

    if isinstance(actual, Mapping):
        if not isinstance(expected, Mapping):
            return False
        return all(
            key in actual and _deep_equal(actual[key], value)
            for key, value in expected.items()
        )

    if isinstance(actual, (Sequence, set)):
        return any(_deep_equal(item, expected) for item in actual)

    return False


def _match(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Search a regular expression in a string."""
    if not isinstance(actual, str) or not isinstance(expected, str):
        return False

    return search(expected, actual) is not None


_ORDERED = (date, datetime, timedelta, str)


def _comparable(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Check that values can be ordered against each other."""
    if is_number(actual) and is_number(expected):
        return True

    return isinstance(actual, _ORDERED) and type(actual) is type(expected)


def _above(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    return _comparable(actual, expected) and actual > expected


def _at_least(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    return _comparable(actual, expected) and actual >= expected


def _below(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    return _comparable(actual, expected) and actual < expected


def _at_most(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    return _comparable(actual, expected) and actual <= expected


def _length_of(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    """Check the length of a sized value."""
    if actual is None or is_number(actual) or isinstance(actual, bool):
        return False

    return len(actual) == expected


def _type_name(value: 'RuntimeValue') -> str:
    """Name the kind of a value the way definition files spell it."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, MAPPINGS):
        return 'object'
    if isinstance(value, SEQUENCES):
        return 'array'

    return type(value).__name__


def _type_of(actual: 'RuntimeValue', expected: 'RuntimeValue') -> bool:
    return isinstance(expected, str) and _type_name(actual) == expected.lower()


equal = Assertion(
    name='equal',
    predicate=_loose_equal,
    template='expected {actual} to equal {expected}',
)

not_equal = equal.negate('notEqual', 'expected {actual} to not equal {expected}')

strict_equal = Assertion(
    name='strictEqual',
    predicate=_strict_equal,
    template='expected {actual} to strictly equal {expected}',
)

not_strict_equal = strict_equal.negate(
    'notStrictEqual',
    'expected {actual} to not strictly equal {expected}',
)

deep_equal = Assertion(
    name='deepEqual',
    predicate=_deep_equal,
    template='expected {actual} to deeply equal {expected}',
)

not_deep_equal = deep_equal.negate('notDeepEqual', 'expected {actual} to not deeply equal {expected}')

is_true = Assertion(
    name='isTrue',
    predicate=lambda actual, expected: actual is True,  # noqa: ARG005
    template='expected {actual} to be true',
)

is_false = Assertion(
    name='isFalse',
    predicate=lambda actual, expected: actual is False,  # noqa: ARG005
    template='expected {actual} to be false',
)

is_ok = Assertion(
    name='isOk',
    predicate=lambda actual, expected: bool(actual),  # noqa: ARG005
    template='expected {actual} to be truthy',
)

is_not_ok = is_ok.negate('isNotOk', 'expected {actual} to be falsy')

is_null = Assertion(
    name='isNull',
    predicate=lambda actual, expected: actual is None,  # noqa: ARG005
    template='expected {actual} to equal null',
)

is_not_null = is_null.negate('isNotNull', 'expected {actual} to not equal null')

match = Assertion(
    name='match',
    predicate=_match,
    template='expected {actual} to match {expected}',
)

not_match = match.negate('notMatch', 'expected {actual} not to match {expected}')

include = Assertion(
    name='include',
    predicate=_include,
    template='expected {actual} to include {expected}',
)

not_include = include.negate('notInclude', 'expected {actual} to not include {expected}')

is_above = Assertion(
    name='isAbove',
    predicate=_above,
    template='expected {actual} to be above {expected}',
)

is_at_least = Assertion(
    name='isAtLeast',
    predicate=_at_least,
    template='expected {actual} to be at least {expected}',
)

is_below = Assertion(
    name='isBelow',
    predicate=_below,
    template='expected {actual} to be below {expected}',
)

is_at_most = Assertion(
    name='isAtMost',
    predicate=_at_most,
    template='expected {actual} to be at most {expected}',
)

length_of = Assertion(
    name='lengthOf',
    predicate=_length_of,
    template='expected {actual} to have a length of {expected}',
)

type_of = Assertion(
    name='typeOf',
    predicate=_type_of,
    template='expected {actual} to be of type {expected}',
)

#: Dispatch table of the built-in assertion kinds.
ASSERTIONS: dict[str, Assertion] = {
    assertion.name: assertion
    for assertion in (
        equal,
        not_equal,
        strict_equal,
        not_strict_equal,
        deep_equal,
        not_deep_equal,
        is_true,
        is_false,
        is_ok,
        is_not_ok,
        is_null,
        is_not_null,
        match,
        not_match,
        include,
        not_include,
        is_above,
        is_at_least,
        is_below,
        is_at_most,
        length_of,
        type_of,
    )
}
