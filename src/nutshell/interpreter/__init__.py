"""Interpreter module for nutshell."""

from .context import Context, Registry, Scope
from .errors import (
    ExitError,
    ListNotExportableError,
    PipelineFailedError,
    ShellError,
    UndefinedFunctionArgumentsError,
    UndefinedVariableError,
    UnboundFunctionArgumentsError,
    UnknownCommandError,
    UnknownVariableError,
)
from .fd import FDTable, FileDescriptor
from .host import Host
from .interpreter import (
    call_function,
    execute_and_or,
    execute_program,
    execute_statement,
    execute_statements,
)
from .pipeline import execute_pipeline
from .types import Args, CommandResult, Io, ShellOptions, Value

__all__ = [
    # Context
    "Context",
    "Registry",
    "Scope",
    "FDTable",
    "FileDescriptor",
    "Host",
    # Execution
    "call_function",
    "execute_and_or",
    "execute_pipeline",
    "execute_program",
    "execute_statement",
    "execute_statements",
    # Types
    "Args",
    "CommandResult",
    "Io",
    "ShellOptions",
    "Value",
    # Errors
    "ExitError",
    "ListNotExportableError",
    "PipelineFailedError",
    "ShellError",
    "UndefinedFunctionArgumentsError",
    "UndefinedVariableError",
    "UnboundFunctionArgumentsError",
    "UnknownCommandError",
    "UnknownVariableError",
]
