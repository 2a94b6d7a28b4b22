"""Core exception hierarchy.

This module defines base error and warning types used across the engine
to report configuration and plugin loading issues, malformed definitions,
and runtime failures of runners, steps and assertions in a structured
and extensible way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

from qaflow.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_SEPARATOR = f' ---{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_SOURCE = '<definition>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the definition source (a file path or loader name).
    source: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Qualified name of the runner being executed.
    runner: str | None
    #: Number of the step where the error occurred.
    step_num: int | None
    #: Number of the test within a step.
    test_num: int | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Context values available at the moment of failure.
    context: dict[str, Any] | None
    #: Definition element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting engine errors.

    Produces human-readable messages with optional location and
    YAML-based snippets of the failing definition element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message.rstrip()

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and execution location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including source, line, column,
            runner, step and test numbers when available.
        """
        indent = cls._ensure_indent(indent)
        message = ''

        if (runner := context.get('runner')) is not None:
            message += f'{indent}in runner "{runner}"'
        else:
            message += f'{indent}in "{context.get('source') or FORMAT_SOURCE}"'
            if (line_num := context.get('line_num')) is not None:
                message += f', line {line_num + 1}'
                if (column_num := context.get('column_num')) is not None:
                    message += f', column {column_num + 1}'
        message += linesep

        if (step_num := context.get('step_num')) is not None:
            message += f'{indent}on step {step_num + 1}'
            if (test_num := context.get('test_num')) is not None:
                message += f', test {test_num + 1}'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = error.problem_mark.get_snippet(indent=0) if error.problem_mark else None
            return cls._make_indent(snippet or '', indent)

        if (element := context.get('element')) is not None:
            return cls._make_snippet(element, context, indent)

        return ''

    @classmethod
    def _make_snippet(cls, element: Any,  # noqa: ANN401
                      context: ErrorContext, indent: str) -> str:
        """Build a YAML-based snippet for an element."""
        snippet = f'{indent}{SNIPPET_ELLIPSIS}'

        if values := context.get('context'):
            snippet += cls._make_yaml({'context': {**values}}, indent)
            snippet += linesep
            snippet += f'{indent}{SNIPPET_SEPARATOR}'

        snippet += cls._make_yaml(element, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively replace non-serializable values with a placeholder."""
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                f'{key}': cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a sanitized value to an indented YAML string."""
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string, dropping blank lines."""
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation given as a string or a number of spaces."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class PluginWarning(UserWarning):
    """Warning emitted for non-fatal plugin-related issues.

    Used when a plugin registration shadows an already registered
    command type.
    """


class QaflowError(Exception, ErrorFormatter):
    """Base exception for all qaflow errors.

    All custom exceptions raised by the engine inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional runtime values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ConfigError(QaflowError):
    """Error raised for invalid engine initialization input.

    Covers a missing or malformed plugin list, loader or reporter.
    """


class PluginLoadError(QaflowError):
    """Error raised when a requested plugin can not be resolved.

    Plugin resolution is fail-fast: a single unresolved plugin aborts
    the whole initialization.
    """

    def __init__(self, message: str, *, plugin: str,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a plugin loading error.

        Args:
            message: Human-readable error description.
            plugin: Name of the offending plugin.
            entrypoint: Optional entry point associated with the error.
        """
        self.plugin = plugin
        self.entrypoint = entrypoint

        super().__init__(message)


class MalformedIdentifierError(QaflowError):
    """Error raised for names and identifiers violating the name rules."""


class UnknownPluginError(QaflowError):
    """Error raised when a step references a plugin never registered."""

    def __init__(self, plugin: str) -> None:
        """Initialize an unknown plugin error.

        Args:
            plugin: Name of the plugin requested by a step.
        """
        self.plugin = plugin

        super().__init__(f'{plugin!r} unsupported plugin')


class DefinitionError(QaflowError):
    """Error raised when a loader can not produce a valid definition."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError, *,
                        source: str | None = None) -> 'Self':
        """Create a definition error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.
            source: Name of the definition source.

        Returns:
            DefinitionError representing the YAML parsing failure.
        """
        error_context = ErrorContext(source=source, error=error)
        if mark := error.problem_mark:
            error_context.update(
                line_num=mark.line,
                column_num=mark.column,
            )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            source: str | None = None) -> 'Self':
        """Create a definition error from a Pydantic validation failure.

        The message points to the most specific failing element found
        by walking the first error location that can be located in data.

        Args:
            error: ValidationError raised by Pydantic.
            data: Raw definition data.
            source: Name of the definition source.

        Returns:
            DefinitionError representing the validation failure.
        """
        error_context = ErrorContext(source=source, error=error, element=data)

        if not data or not isinstance(data, dict):
            return cls('Type validation error', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_pydantic_context(data, item):
                message, value = located
                return cls(message, context=ErrorContext({**error_context, 'element': value}))

        return cls('Validation error', context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the smallest failing fragment of validated data.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if a relevant
            fragment can be located, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)):
                if isinstance(key, int) and 0 <= key < len(last_item):
                    container, last_item, last_key = last_item, last_item[key], key
            elif isinstance(last_item, dict):
                if key in last_item:
                    container, last_item, last_key = last_item, last_item[key], key
            else:
                return None

        message = next((
            line.strip()
            for line in (error.get('msg') or '').splitlines()
            if line.strip()
        ), None)

        if not message or last_key is None:
            return None

        if isinstance(container, (list, tuple)):
            return message, [last_item]

        return message, {last_key: last_item}


class DefinitionNotFoundError(DefinitionError):
    """Error raised when a requested definition does not exist."""


class PathResolutionError(QaflowError):
    """Error raised when a registration path is not resolved in a result."""

    def __init__(self, message: str, *, binding: str | None = None,
                 path: str | None = None,
                 context: ErrorContext | None = None) -> None:
        """Initialize a path resolution error.

        Args:
            message: Human-readable error description.
            binding: Name of the context variable being registered.
            path: The unresolved path.
            context: Error context containing optional runtime values.
        """
        self.binding = binding
        self.path = path

        super().__init__(message, context=context)


class ExecutionError(QaflowError):
    """Error raised when a plugin command fails while running."""

    def __init__(self, message: str, *, command: str | None = None,
                 context: ErrorContext | None = None) -> None:
        """Initialize an execution error.

        Args:
            message: Human-readable error description.
            command: Name of the failed command.
            context: Error context containing optional runtime values.
        """
        self.command = command

        super().__init__(message, context=context)


class AssertionFailure(QaflowError, AssertionError):
    """A single failed test of a step.

    Failures are collected into test results and never propagate out of
    the assertion evaluator on their own.
    """


class RunnerAbortError(QaflowError):
    """Terminal failure of a runner.

    Wraps the error that ended a runner: an execution error, an
    unresolved registration path or a failed test.
    """

    def __init__(self, message: str, *, runner: str | None = None,
                 step: str | None = None, cause: Exception | None = None,
                 context: ErrorContext | None = None) -> None:
        """Initialize a runner abort error.

        Args:
            message: Human-readable error description.
            runner: Qualified name of the aborted runner.
            step: Name of the step that failed.
            cause: The error that ended the runner.
            context: Error context containing optional runtime values.
        """
        self.runner = runner
        self.step = step
        self.cause = cause

        super().__init__(message, context=context)
