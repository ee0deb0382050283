"""nutshell - a small shell evaluation engine.

Runs parsed programs (see nutshell.ast) against a Context of scoped
variables, functions and file descriptors, spawning external programs
and wiring pipelines between them.
"""

from .interpreter import (
    Context,
    ExitError,
    Scope,
    ShellError,
    ShellOptions,
)
from .shell import RunResult, Shell

__all__ = [
    "Context",
    "ExitError",
    "RunResult",
    "Scope",
    "Shell",
    "ShellError",
    "ShellOptions",
]
