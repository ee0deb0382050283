"""Source builtin implementation.

Usage: source file [args...]
       . file [args...]

Execute a script file in the current context. While it runs, $0 is the
file name and $1... are args.
"""

import os

from ..expansion import resolve_path
from ..types import GENERAL_ERROR, SUCCESS, Args, CommandResult, SourceFileAction
from .utils import usage_error


class SourceCommand:
    name = "source"

    def run(self, args: Args) -> CommandResult:
        operands = args.argv[1:]
        if not operands:
            return usage_error(args.io, self.name, "filename argument required")

        path = operands[0]
        if not os.path.isfile(resolve_path(args.context, path)):
            args.io.stderr.write(f"{self.name}: No such file: {path}\n")
            return CommandResult.code(GENERAL_ERROR)

        script_args = [os.path.basename(path), *operands[1:]]
        return CommandResult(
            exit_code=SUCCESS,
            actions=[SourceFileAction(path, script_args)],
        )


class DotCommand(SourceCommand):
    name = "."
