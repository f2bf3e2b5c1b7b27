"""Quire sandbox: policy, AST validation and execution of template bodies."""

from quire.sandbox.executor import PythonExecutor, ScriptExecutor
from quire.sandbox.policy import DEFAULT_POLICY, SandboxPolicy
from quire.sandbox.validator import SandboxValidator

__all__ = [
    "DEFAULT_POLICY",
    "PythonExecutor",
    "SandboxPolicy",
    "SandboxValidator",
    "ScriptExecutor",
]
