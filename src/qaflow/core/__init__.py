"""Step-execution pipeline and runtime.

This package contains the execution side of the engine: plugin
resolution, command preparation and execution, output registration,
assertion evaluation, the runner state machine and the runtime that
drives runners.
"""

from .executor import CommandExecutor
from .outputs import OutputRegister
from .plugins import PluginRegistry
from .preparer import CommandPreparer
from .runner import SUCCESS, RunnerExecutor
from .runtime import Runtime, RuntimeConfig
from .tester import Tester

__all__ = (
    'SUCCESS',
    'CommandExecutor',
    'CommandPreparer',
    'OutputRegister',
    'PluginRegistry',
    'RunnerExecutor',
    'Runtime',
    'RuntimeConfig',
    'Tester',
)
