"""Scoped execution context.

The context store keeps three disjoint mappings of variables:

- `GLOBAL` is populated once from the loader's initial context and
  lives for the whole process;
- `RUNNER` is cleared whenever a runner starts;
- `STEP` is cleared after every completed step.

The effective context seen by a step overlays them in that order, so
step variables shadow runner variables which shadow global ones.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from qaflow.errors import ConfigError
from qaflow.lookups import lookup, render

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.values import RuntimeValue


class Scope(StrEnum):
    """Context scope of a variable."""

    GLOBAL = 'global'
    RUNNER = 'runner'
    STEP = 'step'

    @classmethod
    def parse(cls, value: 'Scope | str') -> 'Scope':
        """Parse a scope name case-insensitively.

        Args:
            value: A scope or its name.

        Returns:
            The scope.

        Raises:
            ConfigError: If the name is not a known scope.
        """
        if isinstance(value, Scope):
            return value

        try:
            return cls(f'{value}'.strip().lower())
        except ValueError as base:
            raise ConfigError(f'Unknown context scope {value!r}') from base


class ContextDict(dict[str, Any]):
    """Read-only-in-practice view of the effective context.

    Provides helpers to resolve dotted paths and to render templates
    against the context values.
    """

    def resolve(self, path: str, default: 'RuntimeValue' = None) -> 'RuntimeValue':
        """Resolve a dotted path tolerantly against the context."""
        return lookup(self, path, default)

    def render(self, template: 'RuntimeValue') -> 'RuntimeValue':
        """Render `${path}` references of a template against the context."""
        return render(template, self)


class ContextStore:
    """Three-tier variable store shared by the active runner and step."""

    def __init__(self, initial: 'Mapping[str, RuntimeValue] | None' = None) -> None:
        """Initialize the store.

        Args:
            initial: Initial `GLOBAL` bindings.
        """
        self._scopes: dict[Scope, dict[str, RuntimeValue]] = {
            scope: {}
            for scope in Scope
        }
        if initial:
            self._scopes[Scope.GLOBAL].update(initial)

    def update(self, key: str, value: 'RuntimeValue',
               scope: Scope | str = Scope.GLOBAL) -> None:
        """Store a value in the given scope, overwriting an existing key."""
        self._scopes[Scope.parse(scope)][key] = value

    def merge(self, bindings: 'Mapping[str, RuntimeValue]',
              scope: Scope | str = Scope.STEP) -> None:
        """Store every binding of a mapping in the given scope."""
        self._scopes[Scope.parse(scope)].update(bindings)

    def effective(self) -> ContextDict:
        """Return the overlay of all scopes.

        Returns:
            A new context: `GLOBAL` entries shadowed by `RUNNER` entries,
            shadowed in turn by `STEP` entries.
        """
        return ContextDict({
            **self._scopes[Scope.GLOBAL],
            **self._scopes[Scope.RUNNER],
            **self._scopes[Scope.STEP],
        })

    def snapshot(self, scope: Scope | str) -> dict[str, 'RuntimeValue']:
        """Return a shallow copy of a single scope."""
        return dict(self._scopes[Scope.parse(scope)])

    def reset(self, scope: Scope | str = Scope.STEP) -> None:
        """Clear a whole scope, leaving the other scopes untouched."""
        self._scopes[Scope.parse(scope)].clear()

    def __repr__(self) -> str:
        """Debug representation."""
        sizes = ', '.join(
            f'{scope}={len(values)}'
            for scope, values in self._scopes.items()
        )
        return f'{type(self).__name__}({sizes})'
