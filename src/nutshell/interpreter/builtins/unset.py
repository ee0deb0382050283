"""Unset builtin implementation.

Usage: unset [-v] name...
       unset -f name...

Remove variables (-v, the default) or functions (-f). The name is unset in
the current scope, hiding any definition in an enclosing scope.
"""

from ..types import SUCCESS, Args, CommandResult
from .utils import UsageError, parse_flags, usage_error


class UnsetCommand:
    name = "unset"

    def run(self, args: Args) -> CommandResult:
        try:
            flags, names = parse_flags(args.argv[1:], "fv")
        except UsageError as e:
            return usage_error(args.io, self.name, str(e))
        if "f" in flags and "v" in flags:
            return usage_error(args.io, self.name, "cannot simultaneously unset a function and a variable")
        if not names:
            return usage_error(args.io, self.name, "missing name")

        for name in names:
            if "f" in flags:
                args.context.unregister_function(name)
            else:
                args.context.unset_var(name)
        return CommandResult.code(SUCCESS)
