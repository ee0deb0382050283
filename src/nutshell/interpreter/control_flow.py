"""Control Flow Execution.

Handles control flow constructs:
- if/elif/else
- while loops
- for-in loops over lists and numeric ranges
- for-of loops splitting a word by chars, lines or words
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast.types import ForIn, ForOfIn, If, IterationRule, ListLiteral, NumericRange, While
from .context import Scope
from .expansion import interpolate_word
from .types import SUCCESS

if TYPE_CHECKING:
    from ..ast.types import Program
    from .context import Context


def execute_if(ctx: "Context", node: If) -> int:
    """Execute an if statement.

    The first condition exiting with 0 selects its branch. A trailing
    branch without a condition is the else branch.
    """
    from .interpreter import execute_and_or, execute_program

    for condition, branch in zip(node.conditions, node.branches):
        if execute_and_or(condition, ctx) == 0:
            # The condition's status does not leak past the chain
            ctx.register_exit(SUCCESS)
            return execute_program(branch, ctx)

    ctx.register_exit(SUCCESS)
    if len(node.branches) > len(node.conditions):
        return execute_program(node.branches[-1], ctx)
    return SUCCESS


def execute_while(ctx: "Context", node: While) -> int:
    """Execute a while loop."""
    from .interpreter import execute_and_or, execute_program

    exit_code = SUCCESS
    while execute_and_or(node.condition, ctx) == 0:
        exit_code = execute_program(node.body, ctx)
    return exit_code


def execute_for(ctx: "Context", node: ForIn) -> int:
    """Execute a for loop over a list or numeric range."""
    if isinstance(node.iterable, NumericRange):
        return _run_loop(ctx, node.variable, node.iterable.items(), node.body)

    assert isinstance(node.iterable, ListLiteral)

    def items():
        for word in node.iterable.items:
            yield interpolate_word(ctx, word)

    return _run_loop(ctx, node.variable, items(), node.body)


def execute_for_of(ctx: "Context", node: ForOfIn) -> int:
    """Execute a for loop over the parts of a word."""
    source = interpolate_word(ctx, node.iterable)
    if node.rule == IterationRule.CHARS:
        items = list(source)
    elif node.rule == IterationRule.LINES:
        items = source.splitlines()
    else:
        items = source.split()
    return _run_loop(ctx, node.variable, items, node.body)


def _run_loop(ctx: "Context", variable: str, items, body: "Program") -> int:
    """Bind each item to the loop variable in a loop scope and run the body."""
    from .interpreter import execute_program

    exit_code = SUCCESS
    iterations = 0
    ctx.push_scope(Scope("for"))
    try:
        for item in items:
            ctx.set_var(variable, item)
            exit_code = execute_program(body, ctx)
            iterations += 1
    finally:
        ctx.pop_scope()

    # Exit codes registered inside the loop scope are gone with it
    if iterations:
        ctx.register_exit(exit_code)
    return exit_code
