"""Control flow builtins: exit.

Usage: exit [n]

Leave the current scope (function, sourced file, subshell or the shell
itself) with status n, or with the last exit status when n is omitted.
"""

from ..types import Args, CommandResult, ExitScopeAction
from .utils import usage_error


class ExitCommand:
    name = "exit"

    def run(self, args: Args) -> CommandResult:
        operands = args.argv[1:]
        if len(operands) > 1:
            return usage_error(args.io, self.name, "too many arguments")

        if operands:
            try:
                exit_code = int(operands[0])
            except ValueError:
                return usage_error(args.io, self.name, f"{operands[0]}: numeric argument required")
        else:
            exit_code = args.context.last_exit

        return CommandResult(exit_code=exit_code, actions=[ExitScopeAction(exit_code)])
