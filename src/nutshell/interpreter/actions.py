"""Builtin action dispatch.

Builtins cannot reach into the evaluator, so they return actions instead:
requests for interpolation, command resolution, sourcing a file or leaving
the current scope. The dispatcher performs each action in order and hands
the outcome to the action's continuation along with the builtin's Io.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Sequence

from .context import Scope
from .errors import ExitError, ShellError, SourceError
from .expansion import interpolate_word, parse_interpolation, resolve_path
from .pipeline import find_in_path
from .types import (
    SUCCESS,
    Action,
    CommandKind,
    CommandResult,
    CommandType,
    ExitScopeAction,
    InterpolateAction,
    Io,
    ResolveCommandPathAction,
    ResolveCommandTypeAction,
    SourceFileAction,
)

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


def handle_actions(result: CommandResult, ctx: "Context", io: Io) -> int:
    """Perform a builtin's actions and return the command's exit code.

    A non-zero code returned by a continuation overrides the builtin's own
    exit code.
    """
    exit_code = result.exit_code
    for action in result.actions:
        code = handle_action(action, ctx, io)
        if code != SUCCESS:
            exit_code = code
    return exit_code


def handle_action(action: Action, ctx: "Context", io: Io) -> int:
    logger.debug("handling action %s", type(action).__name__)

    if isinstance(action, InterpolateAction):
        try:
            value = interpolate_word(ctx, parse_interpolation(action.text))
        except ShellError as e:
            return action.continuation(io, None, str(e))
        return action.continuation(io, value, None)

    if isinstance(action, ResolveCommandTypeAction):
        return action.continuation(io, action.name, resolve_command_type(ctx, action.name))

    if isinstance(action, ResolveCommandPathAction):
        return action.continuation(io, action.name, find_in_path(ctx, action.name))

    if isinstance(action, SourceFileAction):
        exit_code = source_file(ctx, action.path, action.args)
        if action.continuation is not None:
            return action.continuation(io, exit_code)
        return exit_code

    if isinstance(action, ExitScopeAction):
        raise ExitError(action.exit_code)

    raise TypeError(f"unknown action: {type(action).__name__}")


def resolve_command_type(ctx: "Context", name: str) -> CommandType:
    """Resolve what a command name refers to, aliases first."""
    alias = ctx.aliases.get(name)
    if alias is not None:
        return CommandType(CommandKind.ALIAS, alias)
    if name in ctx.builtins:
        return CommandType(CommandKind.BUILTIN)
    if ctx.get_function(name) is not None:
        return CommandType(CommandKind.FUNCTION)
    path = find_in_path(ctx, name)
    if path is not None:
        return CommandType(CommandKind.PROGRAM, path)
    return CommandType(CommandKind.UNKNOWN)


def source_file(ctx: "Context", path: str, args: Sequence[str]) -> int:
    """Execute a script file in the current context.

    The file runs in a transparent scope, so variables and functions it
    defines stay defined afterwards. exit leaves the file only.
    """
    from .interpreter import execute_program

    if ctx.parse is None:
        raise SourceError(path, "no parser configured")

    full_path = resolve_path(ctx, path)
    try:
        with open(full_path, encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        raise SourceError(path, e.strerror or str(e)) from e

    program = ctx.parse(source)
    ctx.push_scope(Scope.transparent(os.path.basename(path), args=list(args)))
    try:
        return execute_program(program, ctx)
    except ExitError as e:
        return e.exit_code
    finally:
        ctx.pop_scope()
