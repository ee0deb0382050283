"""Alias and unalias builtin implementations.

Usage: alias
       alias name
       alias name value
       unalias name...

With no arguments, alias prints every alias sorted by name. With a name it
prints that alias; with a name and a value it defines the alias.
"""

from ..types import SUCCESS, Args, CommandResult, Io
from .utils import fail, usage_error


def _print_alias(io: Io, name: str, value: str) -> None:
    io.stdout.write(f'alias {name} "{value}"\n')


class AliasCommand:
    name = "alias"

    def run(self, args: Args) -> CommandResult:
        operands = args.argv[1:]
        aliases = args.context.aliases

        if not operands:
            for name, value in aliases.items():
                _print_alias(args.io, name, value)
            return CommandResult.code(SUCCESS)

        if len(operands) == 1:
            value = aliases.get(operands[0])
            if value is None:
                return fail(args.io, self.name, f"{operands[0]}: not found")
            _print_alias(args.io, operands[0], value)
            return CommandResult.code(SUCCESS)

        if len(operands) == 2:
            aliases.insert(operands[0], operands[1])
            return CommandResult.code(SUCCESS)

        return usage_error(args.io, self.name, "too many arguments")


class UnaliasCommand:
    name = "unalias"

    def run(self, args: Args) -> CommandResult:
        for name in args.argv[1:]:
            args.context.aliases.remove(name)
        return CommandResult.code(SUCCESS)
