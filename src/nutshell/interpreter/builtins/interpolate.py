"""Interpolate builtin implementation.

Usage: interpolate text...

Interpolate each text argument using the current context and print the
result on its own line.
"""

from typing import Optional

from ..types import GENERAL_ERROR, SUCCESS, Args, CommandResult, InterpolateAction, Io
from .utils import usage_error


def _print_interpolated(io: Io, value: Optional[str], error: Optional[str]) -> int:
    if error is not None:
        io.stderr.write(f"interpolate: {error}\n")
        return GENERAL_ERROR
    io.stdout.write(f"{value}\n")
    return SUCCESS


class InterpolateCommand:
    name = "interpolate"

    def run(self, args: Args) -> CommandResult:
        texts = args.argv[1:]
        if not texts:
            return usage_error(args.io, self.name, "missing text")
        return CommandResult(
            exit_code=SUCCESS,
            actions=[InterpolateAction(text, _print_interpolated) for text in texts],
        )
