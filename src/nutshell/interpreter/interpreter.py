"""Interpreter - AST Execution Engine.

Executes statements against a Context. Delegates to specialized modules for:
- Word expansion (expansion.py)
- Control flow (control_flow.py)
- Pipelines, redirects and processes (pipeline.py)
- Builtin actions (actions.py)

Every execute_* function returns the exit code of what it ran.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ..ast.types import (
    AndOr,
    AndOrOp,
    Assignment,
    ForIn,
    ForOfIn,
    FunctionDef,
    If,
    ListLiteral,
    Program,
    Statement,
    SubshellStatement,
    While,
)
from .context import Scope
from .control_flow import execute_for, execute_for_of, execute_if, execute_while
from .errors import (
    ExitError,
    UnboundFunctionArgumentsError,
    UndefinedFunctionArgumentsError,
)
from .expansion import interpolate_value, interpolate_word
from .pipeline import execute_pipeline
from .types import SUCCESS, Value

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


def execute_program(program: Program, ctx: "Context") -> int:
    return execute_statements(program.statements, ctx)


def execute_statements(statements: Sequence[Statement], ctx: "Context") -> int:
    exit_code = SUCCESS
    for statement in statements:
        exit_code = execute_statement(statement, ctx)
    return exit_code


def execute_statement(statement: Statement, ctx: "Context") -> int:
    """Execute a single statement."""
    if isinstance(statement, AndOr):
        return execute_and_or(statement, ctx)
    if isinstance(statement, Assignment):
        return execute_assignment(statement, ctx)
    if isinstance(statement, FunctionDef):
        ctx.register_function(statement)
        return SUCCESS
    if isinstance(statement, If):
        return execute_if(ctx, statement)
    if isinstance(statement, While):
        return execute_while(ctx, statement)
    if isinstance(statement, ForIn):
        return execute_for(ctx, statement)
    if isinstance(statement, ForOfIn):
        return execute_for_of(ctx, statement)
    if isinstance(statement, SubshellStatement):
        with ctx.clone() as inner:
            exit_code = execute_subshell(statement.program, inner)
        ctx.register_exit(exit_code)
        return exit_code
    raise TypeError(f"unknown statement: {type(statement).__name__}")


def execute_and_or(and_or: AndOr, ctx: "Context") -> int:
    """Execute pipelines joined by && and ||.

    The first pipeline always runs. Evaluation stops at the first operator
    whose condition does not hold.
    """
    pipelines = list(and_or.pipelines)
    if not pipelines:
        return SUCCESS

    exit_code = execute_pipeline(pipelines[0], ctx)
    for op, pipeline in zip(and_or.operators, pipelines[1:]):
        if op == AndOrOp.AND and exit_code != 0:
            break
        if op == AndOrOp.OR and exit_code == 0:
            break
        exit_code = execute_pipeline(pipeline, ctx)

    ctx.register_exit(exit_code)
    return exit_code


def execute_assignment(assignment: Assignment, ctx: "Context") -> int:
    key = interpolate_word(ctx, assignment.key)
    value: Value
    if isinstance(assignment.value, ListLiteral):
        value = [interpolate_word(ctx, item) for item in assignment.value.items]
    else:
        value = interpolate_value(ctx, assignment.value)
    ctx.set_var(key, value)
    return SUCCESS


def execute_subshell(program: Program, ctx: "Context") -> int:
    """Execute a program inside an already cloned context.

    exit leaves the subshell only.
    """
    try:
        return execute_program(program, ctx)
    except ExitError as e:
        ctx.register_exit(e.exit_code)
        return e.exit_code


def call_function(function: FunctionDef, args: Sequence[str], ctx: "Context") -> int:
    """Call a function with arguments (the function name excluded).

    Fixed parameters are bound positionally; any remaining arguments go to
    the list parameter, if the function declares one.
    """
    fixed = list(function.args)
    if len(args) < len(fixed):
        raise UndefinedFunctionArgumentsError(fixed[len(args):])
    if function.list_arg is None and len(args) > len(fixed):
        raise UnboundFunctionArgumentsError(list(args[len(fixed):]))

    scope = Scope(function.name, args=[function.name, *args])
    assert scope.vars is not None
    for name, value in zip(fixed, args):
        scope.vars[name] = value
    if function.list_arg is not None:
        scope.vars[function.list_arg] = list(args[len(fixed):])

    logger.debug("calling function %s with %d arguments", function.name, len(args))
    ctx.push_scope(scope)
    try:
        return execute_program(function.body, ctx)
    except ExitError as e:
        return e.exit_code
    finally:
        ctx.pop_scope()
