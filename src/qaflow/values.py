"""Core value type definitions.

This module defines the value aliases shared by the context store,
definition models and assertions, and the container groups used to
walk nested values.
"""

from datetime import date, datetime, timedelta
from typing import Any

#: Scalars are atomic values that are consumed directly by assertions
#: and template rendering.
type Scalar = date | datetime | timedelta | str | bytes | int | float | bool

#: A value is any scalar or a nested structure of scalars. Context
#: variables, step properties and expected assertion values are values.
type Value = Scalar | list['Value'] | dict[str, 'Value'] | None

#: A runtime value represents any Python object received from plugin
#: commands prior to registration into the context store.
type RuntimeValue = Any

MAPPINGS = (dict,)
SCALARS = (date, datetime, timedelta, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)
NUMBERS = (int, float)


def is_number(value: RuntimeValue) -> bool:
    """Check whether a value is a real number (booleans excluded)."""
    return isinstance(value, NUMBERS) and not isinstance(value, bool)
