"""Definition schema of runners, steps, tests and plugin commands.

Defines immutable Pydantic models that describe the definitions a
loader supplies, and the abstract contract of plugin commands. The
module is declarative: execution is implemented by `qaflow.core`.
"""

from .checks import TestResult, TestSpec
from .commands import BaseCommand, CommandResult
from .registers import DEFAULT_SECTION, Registration, RegistrationStatement
from .runners import CommandDefinition, RunnerDefinition
from .steps import Step

__all__ = (
    'DEFAULT_SECTION',
    'BaseCommand',
    'CommandDefinition',
    'CommandResult',
    'Registration',
    'RegistrationStatement',
    'RunnerDefinition',
    'Step',
    'TestResult',
    'TestSpec',
)
