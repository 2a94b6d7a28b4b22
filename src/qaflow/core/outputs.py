"""Output registration.

Copies values out of a command result into the context store as
declared by a step's registration statement.
"""

import logging
from typing import TYPE_CHECKING

from qaflow.errors import PathResolutionError
from qaflow.lookups import MISSING, PathLookup

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from qaflow.context import ContextStore
    from qaflow.schema import CommandResult, Registration
    from qaflow.values import RuntimeValue

logger = logging.getLogger(__name__)


class OutputRegister:
    """Writer of registered result values."""

    def __init__(self, store: 'ContextStore') -> None:
        self.store = store

    def extract(self, name: str, binding: 'Registration',
                result: 'CommandResult') -> 'RuntimeValue':
        """Resolve a single binding against a result.

        Args:
            name: Context variable the binding registers.
            binding: Registration binding.
            result: Command result.

        Returns:
            The value at the binding location.

        Raises:
            PathResolutionError: If the section or any path segment
                is missing, or the binding declares no path.
        """
        if not binding.path:
            raise PathResolutionError(
                f'Registration of {name!r} has no path',
                binding=name,
            )

        section = result.get(binding.section, MISSING)
        if section is MISSING:
            raise PathResolutionError(
                f'Registration of {name!r} failed: no {binding.section!r} section in result',
                binding=name,
                path=binding.path,
            )

        try:
            return PathLookup(binding.path).extract(section)
        except PathResolutionError as base:
            raise PathResolutionError(
                f'Registration of {name!r} failed: {base.message}',
                binding=name,
                path=binding.path,
            ) from base

    def register(self, statement: 'Mapping[str, Registration]',
                 result: 'CommandResult') -> None:
        """Write every binding of a statement into the context store.

        Bindings are processed in declaration order. Processing stops at
        the first unresolved binding; values written before it are kept.

        Args:
            statement: Mapping of new variable names to bindings.
            result: Command result.

        Raises:
            PathResolutionError: If a binding can not be resolved.
        """
        for name, binding in statement.items():
            value = self.extract(name, binding, result)
            self.store.update(name, value, binding.scope)
            logger.debug('registered %s in %s scope', name, binding.scope)
