"""Cd builtin implementation.

Usage: cd [dir]
       cd -

Change the working directory ($PWD) to dir. If dir is not specified,
change to $HOME. If dir is -, change to $OLDPWD and print it.
"""

import os

from ..expansion import lookup_variable, resolve_path
from ..types import SUCCESS, Args, CommandResult
from .utils import fail, usage_error


class CdCommand:
    name = "cd"

    def run(self, args: Args) -> CommandResult:
        ctx = args.context
        operands = args.argv[1:]
        if operands and operands[0] == "--":
            operands = operands[1:]
        if len(operands) > 1:
            return usage_error(args.io, self.name, "too many arguments")

        if not operands:
            target = lookup_variable(ctx, "HOME")
        elif operands[0] == "-":
            target = ctx.get_var("OLDPWD")
        else:
            target = resolve_path(ctx, operands[0])

        if not isinstance(target, str) or not target:
            return fail(args.io, self.name, "No directory to change to.")
        target = os.path.normpath(target)
        if not os.path.isdir(target):
            return fail(args.io, self.name, "Path is not a directory.")

        pwd = lookup_variable(ctx, "PWD")
        if isinstance(pwd, str):
            ctx.set_var("OLDPWD", pwd)
        ctx.set_var("PWD", target)

        if operands and operands[0] == "-":
            args.io.stdout.write(target + "\n")
        return CommandResult.code(SUCCESS)
