"""Command lookup builtins: type, which.

Usage: type name...
       which name...

type reports whether each name is an alias, builtin, function or program.
which prints the path of each program found in $PATH.
"""

from typing import Optional

from ..types import (
    GENERAL_ERROR,
    SUCCESS,
    Args,
    CommandKind,
    CommandResult,
    CommandType,
    Io,
    ResolveCommandPathAction,
    ResolveCommandTypeAction,
)
from .utils import usage_error


def _print_type(io: Io, name: str, command_type: CommandType) -> int:
    kind = command_type.kind
    if kind == CommandKind.ALIAS:
        io.stdout.write(f"{name} is aliased to '{command_type.value}'\n")
    elif kind == CommandKind.BUILTIN:
        io.stdout.write(f"{name} is a shell built-in\n")
    elif kind == CommandKind.FUNCTION:
        io.stdout.write(f"{name} is a function\n")
    elif kind == CommandKind.PROGRAM:
        io.stdout.write(f"{name} is '{command_type.value}'\n")
    else:
        io.stderr.write(f"type: {name}: not found\n")
        return GENERAL_ERROR
    return SUCCESS


def _print_path(io: Io, name: str, path: Optional[str]) -> int:
    if path is None:
        io.stderr.write(f"which: no '{name}' in path.\n")
        return GENERAL_ERROR
    io.stdout.write(f"{path}\n")
    return SUCCESS


class TypeCommand:
    name = "type"

    def run(self, args: Args) -> CommandResult:
        names = args.argv[1:]
        if not names:
            return usage_error(args.io, self.name, "missing name")
        return CommandResult(
            exit_code=SUCCESS,
            actions=[ResolveCommandTypeAction(name, _print_type) for name in names],
        )


class WhichCommand:
    name = "which"

    def run(self, args: Args) -> CommandResult:
        names = args.argv[1:]
        if not names:
            return usage_error(args.io, self.name, "missing name")
        return CommandResult(
            exit_code=SUCCESS,
            actions=[ResolveCommandPathAction(name, _print_path) for name in names],
        )
