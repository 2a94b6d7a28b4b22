"""Progress reporters."""

from .base import BaseReporter, NullReporter, RunnerResult
from .console import ConsoleReporter
from .logs import LoggingReporter

__all__ = (
    'BaseReporter',
    'ConsoleReporter',
    'LoggingReporter',
    'NullReporter',
    'RunnerResult',
)
