"""Export builtin implementation.

Usage: export name[=value]...

Mark variables for export to child processes. name=value assigns the
value first. Only word values can be exported.
"""

from ..errors import ListNotExportableError, UnknownVariableError
from ..types import GENERAL_ERROR, SUCCESS, Args, CommandResult
from .utils import usage_error


class ExportCommand:
    name = "export"

    def run(self, args: Args) -> CommandResult:
        names = args.argv[1:]
        if not names:
            return usage_error(args.io, self.name, "missing variable name")

        exit_code = SUCCESS
        for item in names:
            name, sep, value = item.partition("=")
            if not name:
                args.io.stderr.write(f"{self.name}: `{item}': not a valid identifier\n")
                exit_code = GENERAL_ERROR
                continue
            if sep:
                args.context.set_var(name, value)
            try:
                args.context.export_var(name)
            except (UnknownVariableError, ListNotExportableError) as e:
                args.io.stderr.write(f"{self.name}: {e}\n")
                exit_code = GENERAL_ERROR
        return CommandResult.code(exit_code)
