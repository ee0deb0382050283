"""Interpreter types for nutshell."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, TextIO, Union

if TYPE_CHECKING:
    from .context import Context


Value = Union[str, list[str]]
"""A variable value: a word (str) or a list of words."""


# Exit statuses
SUCCESS = 0
GENERAL_ERROR = 1
BUILTIN_ERROR = 2
COMMAND_NOT_FOUND = 127

# Conventional file descriptor numbers
FD_STDIN = 0
FD_STDOUT = 1
FD_STDERR = 2


@dataclass
class ShellOptions:
    """Shell configuration."""

    nounset: bool = True
    """Treat unset variables as an error when interpolating.

    When disabled, undefined variables expand to the empty string.
    """

    name: str = "nutshell"
    """Name used to prefix diagnostics."""

    interactive: bool = False
    """Keep executing statements after an error instead of stopping."""


@dataclass
class Io:
    """Text streams handed to a builtin.

    The streams are owned by the Io and closed by the executor once the
    builtin (and any of its actions) has finished.
    """

    stdin: TextIO
    stdout: TextIO
    stderr: TextIO

    def close(self) -> None:
        for stream in (self.stdin, self.stdout, self.stderr):
            if not stream.closed:
                try:
                    stream.close()
                except BrokenPipeError:
                    # The reading end of a pipe went away.
                    pass


@dataclass
class Args:
    """Arguments passed to a builtin's run method.

    ``context.args()`` holds the full argument vector, the command name
    included.
    """

    context: "Context"
    io: Io

    @property
    def argv(self) -> list[str]:
        return self.context.args()


# =============================================================================
# Actions
# =============================================================================


class CommandKind(Enum):
    ALIAS = "alias"
    BUILTIN = "builtin"
    FUNCTION = "function"
    PROGRAM = "program"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CommandType:
    """What a command name resolves to.

    ``value`` is the alias text for aliases and the path for programs.
    """

    kind: CommandKind
    value: Optional[str] = None


@dataclass
class InterpolateAction:
    """Interpolate text using the current context.

    The continuation receives the interpolated text, or None and an error
    message.
    """

    text: str
    continuation: Callable[[Io, Optional[str], Optional[str]], int]


@dataclass
class ResolveCommandTypeAction:
    name: str
    continuation: Callable[[Io, str, CommandType], int]


@dataclass
class ResolveCommandPathAction:
    name: str
    continuation: Callable[[Io, str, Optional[str]], int]


@dataclass
class SourceFileAction:
    """Execute a script file in the current context.

    ``args`` become the positional arguments while the file runs; the
    continuation receives the script's exit code.
    """

    path: str
    args: list[str]
    continuation: Optional[Callable[[Io, int], int]] = None


@dataclass
class ExitScopeAction:
    exit_code: int


Action = Union[
    InterpolateAction,
    ResolveCommandTypeAction,
    ResolveCommandPathAction,
    SourceFileAction,
    ExitScopeAction,
]


@dataclass
class CommandResult:
    """Result of running a builtin: an exit code and deferred actions."""

    exit_code: int = SUCCESS
    actions: list[Action] = field(default_factory=list)

    @classmethod
    def code(cls, exit_code: int) -> "CommandResult":
        return cls(exit_code=exit_code)
