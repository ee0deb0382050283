"""Interpreter errors.

Every shell-level failure derives from ShellError. Errors abort the current
statement and propagate to the nearest function call or loop boundary; the
Shell facade decides whether to keep going.
"""

from __future__ import annotations

from typing import Sequence


class ShellError(Exception):
    """Base class for all evaluation errors."""


# =============================================================================
# File descriptors
# =============================================================================


class FileDescriptorError(ShellError):
    """A file descriptor could not be used the way it was requested."""


class UnusableForInputError(FileDescriptorError):
    def __init__(self) -> None:
        super().__init__("file descriptor cannot be used for input")


class UnusableForOutputError(FileDescriptorError):
    def __init__(self) -> None:
        super().__init__("file descriptor cannot be used for output")


class FileNotReadableError(FileDescriptorError):
    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        message = f"file not readable: {path}"
        super().__init__(f"{message}: {reason}" if reason else message)


class FileNotWritableError(FileDescriptorError):
    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        message = f"file not writable: {path}"
        super().__init__(f"{message}: {reason}" if reason else message)


# =============================================================================
# Context
# =============================================================================


class UnknownVariableError(ShellError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown variable: {name}")


class ListNotExportableError(ShellError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"cannot export list variable: {name}")


# =============================================================================
# Expansion
# =============================================================================


class ExpansionError(ShellError):
    """A word could not be expanded."""


class UndefinedVariableError(ExpansionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"undefined variable: {name}")


class InvalidRegexError(ExpansionError):
    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid regex '{pattern}': {reason}")


class InvalidListInterpolationError(ExpansionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"cannot interpolate list: {name}")


class UnknownFilterError(ExpansionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown filter: {name}")


class InvalidConditionError(ExpansionError):
    def __init__(self, words: Sequence[str]) -> None:
        self.words = list(words)
        super().__init__(f"invalid condition: {' '.join(words)}")


class FilterError(ExpansionError):
    """A filter could not be applied."""


class InvalidArgsError(FilterError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"invalid arguments for filter: {reason}")


class InvalidListFilterError(FilterError):
    def __init__(self) -> None:
        super().__init__("the filter cannot be applied to lists")


class InvalidWordFilterError(FilterError):
    def __init__(self) -> None:
        super().__init__("the filter cannot be applied to words")


class MissingArgError(FilterError):
    def __init__(self, arg: str) -> None:
        self.arg = arg
        super().__init__(f"missing required argument '{arg}'")


class NoArgsAllowedError(FilterError):
    def __init__(self) -> None:
        super().__init__("the filter does not accept any arguments")


class NoSuchValueError(FilterError):
    def __init__(self) -> None:
        super().__init__("no such value")


class TooManyArgsError(FilterError):
    def __init__(self) -> None:
        super().__init__("too many arguments")


# =============================================================================
# Resolution
# =============================================================================


class ResolutionError(ShellError):
    """A command or descriptor could not be resolved."""


class UnknownCommandError(ResolutionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown command: {name}")


class UndefinedFileDescriptorError(ResolutionError):
    def __init__(self, fd: int) -> None:
        self.fd = fd
        super().__init__(f"undefined file descriptor: {fd}")


class InvalidRedirectError(ResolutionError):
    def __init__(self) -> None:
        super().__init__("cannot redirect a file to a file")


# =============================================================================
# Processes
# =============================================================================


class ProcessError(ShellError):
    """Spawning or wiring a process failed."""


class ChildSpawnFailedError(ProcessError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to spawn child process: {reason}")


class ContextCloneFailedError(ProcessError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to clone context: {reason}")


class CreatePipeFailedError(ProcessError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to create pipe: {reason}")


class PipelineFailedError(ProcessError):
    """One or more segments of a pipeline could not be started."""

    def __init__(self, errors: Sequence[ShellError]) -> None:
        self.errors = list(errors)
        details = ", ".join(str(error) for error in self.errors)
        super().__init__(f"pipeline failed: {details}")


# =============================================================================
# Functions
# =============================================================================


class FunctionCallError(ShellError):
    """A function was called with the wrong number of arguments."""


class UndefinedFunctionArgumentsError(FunctionCallError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"undefined function arguments: {', '.join(names)}")


class UnboundFunctionArgumentsError(FunctionCallError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"unbound function arguments: {', '.join(names)}")


# =============================================================================
# Misc
# =============================================================================


class ShellIOError(ShellError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"input/output error: {reason}")


class SourceError(ShellError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"cannot source {path}: {reason}")


class ExitError(Exception):
    """Raised to leave the current scope (exit builtin).

    Caught by function calls, sourced files, subshells and the Shell facade,
    which turn it back into an exit code.
    """

    def __init__(self, exit_code: int) -> None:
        self.exit_code = exit_code
        super().__init__(f"exit {exit_code}")
