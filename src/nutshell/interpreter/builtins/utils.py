"""Helpers shared by builtins."""

from __future__ import annotations

from ..types import BUILTIN_ERROR, GENERAL_ERROR, CommandResult, Io


class UsageError(Exception):
    """Bad flags or arguments passed to a builtin."""


def parse_flags(args: list[str], allowed: str) -> tuple[set[str], list[str]]:
    """Split single-letter flags from positional arguments.

    Flags may be combined (-ab). Parsing stops at -- or the first
    positional argument. A lone - is positional.
    """
    flags: set[str] = set()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            i += 1
            break
        if not arg.startswith("-") or arg == "-":
            break
        for ch in arg[1:]:
            if ch not in allowed:
                raise UsageError(f"-{ch}: invalid option")
            flags.add(ch)
        i += 1
    return flags, args[i:]


def fail(io: Io, name: str, message: str, exit_code: int = GENERAL_ERROR) -> CommandResult:
    """Report an error on stderr and return exit_code."""
    io.stderr.write(f"{name}: {message}\n")
    return CommandResult.code(exit_code)


def usage_error(io: Io, name: str, message: str) -> CommandResult:
    return fail(io, name, message, BUILTIN_ERROR)
