"""Miscellaneous builtins: true, false, echo, pwd, sleep.

These are simple builtins that don't need their own files.
"""

import time

from ..expansion import lookup_variable
from ..types import GENERAL_ERROR, SUCCESS, Args, CommandResult
from .utils import UsageError, fail, parse_flags, usage_error


class TrueCommand:
    name = "true"

    def run(self, args: Args) -> CommandResult:
        return CommandResult.code(SUCCESS)


class FalseCommand:
    name = "false"

    def run(self, args: Args) -> CommandResult:
        return CommandResult.code(GENERAL_ERROR)


class EchoCommand:
    """Usage: echo [-n] [text...]"""

    name = "echo"

    def run(self, args: Args) -> CommandResult:
        try:
            flags, words = parse_flags(args.argv[1:], "n")
        except UsageError as e:
            return usage_error(args.io, self.name, str(e))

        args.io.stdout.write(" ".join(words))
        if "n" not in flags:
            args.io.stdout.write("\n")
        args.io.stdout.flush()
        return CommandResult.code(SUCCESS)


class PwdCommand:
    name = "pwd"

    def run(self, args: Args) -> CommandResult:
        pwd = lookup_variable(args.context, "PWD")
        if not isinstance(pwd, str):
            return fail(args.io, self.name, "Unknown working directory.")
        args.io.stdout.write(pwd + "\n")
        return CommandResult.code(SUCCESS)


_UNITS = {
    "seconds": 1,
    "minutes": 60,
    "hours": 3600,
}


class SleepCommand:
    """Usage: sleep duration [seconds|minutes|hours]"""

    name = "sleep"

    def run(self, args: Args) -> CommandResult:
        operands = args.argv[1:]
        if not operands or len(operands) > 2:
            return usage_error(args.io, self.name, "usage: sleep duration [seconds|minutes|hours]")

        try:
            duration = int(operands[0])
        except ValueError:
            return usage_error(args.io, self.name, f"invalid duration: {operands[0]}")
        if duration < 0:
            return usage_error(args.io, self.name, f"invalid duration: {operands[0]}")

        unit = operands[1] if len(operands) == 2 else "seconds"
        if unit not in _UNITS:
            return usage_error(args.io, self.name, f"invalid unit: {unit}")

        if duration:
            time.sleep(duration * _UNITS[unit])
        return CommandResult.code(SUCCESS)
