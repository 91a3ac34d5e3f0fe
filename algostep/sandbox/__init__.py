"""
Sandboxed execution of user scripts with instrumentation hooks.
"""

from .engine import (
    TIMEOUT_MESSAGE,
    ExecutionError,
    ExecutionResult,
    HookArgumentError,
    HookRecorder,
    SandboxEngine,
    ScriptTimeout,
    execute_script,
)

__all__ = [
    "TIMEOUT_MESSAGE",
    "ExecutionError",
    "ExecutionResult",
    "HookArgumentError",
    "HookRecorder",
    "SandboxEngine",
    "ScriptTimeout",
    "execute_script",
]
