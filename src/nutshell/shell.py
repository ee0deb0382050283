"""Main Shell class - the primary API for nutshell.

Example usage:
    from nutshell import Shell
    from nutshell.ast import AndOr, Command, Literal, Pipeline, Program

    echo = Command(arguments=(Literal("echo"), Literal("hello")))
    program = Program(statements=(AndOr(pipelines=(Pipeline(segments=(echo,)),)),))

    # Synchronous usage (for REPLs, scripts)
    shell = Shell()
    result = shell.run(program)
    print(result.exit_code)  # 0

    # Async usage (for async applications)
    shell = Shell()
    result = await shell.exec(program)

    # With a parser, source text can be run directly
    shell = Shell(parse=my_parser)
    result = shell.run("echo hello")
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .ast.types import Program
from .filters import create_filter_registry
from .interpreter import (
    Context,
    ExitError,
    Registry,
    Scope,
    ShellError,
    ShellOptions,
    execute_statement,
)
from .interpreter.builtins import create_builtin_registry
from .interpreter.fd import FDTable
from .interpreter.types import FD_STDERR, GENERAL_ERROR, SUCCESS

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of running a program."""

    exit_code: int = SUCCESS
    """Exit code of the last statement, or of exit."""

    errors: list[ShellError] = field(default_factory=list)
    """Errors reported while running."""

    exited: bool = False
    """Whether the program ran exit."""


class Shell:
    """Main shell class.

    Owns a Context and runs programs against it statement by statement.
    State (variables, functions, aliases, working directory) persists
    between runs until reset() is called.
    """

    def __init__(
        self,
        *,
        env: Optional[dict[str, str]] = None,
        cwd: Optional[str] = None,
        inherit_env: bool = True,
        aliases: Optional[dict[str, str]] = None,
        builtins: Optional[dict] = None,
        filters: Optional[dict] = None,
        parse: Optional[Callable[[str], Program]] = None,
        nounset: bool = True,
        interactive: bool = False,
        name: str = "nutshell",
    ):
        """Initialize the shell.

        Args:
            env: Additional environment variables, exported to child processes.
            cwd: Initial working directory. Defaults to the process's own.
            inherit_env: Seed variables from os.environ.
            aliases: Initial aliases.
            builtins: Builtin registry. If not provided, uses the default builtins.
            filters: Filter registry. If not provided, uses the default filters.
            parse: Parser turning source text into a Program. Needed for
                source and for running text.
            nounset: Treat undefined variables as an error.
            interactive: Keep going after a failing statement.
            name: Name used to prefix error messages.
        """
        self._env = dict(env or {})
        self._cwd = os.path.abspath(cwd) if cwd else os.getcwd()
        self._inherit_env = inherit_env
        self._aliases = dict(aliases or {})
        self._builtins = builtins if builtins is not None else create_builtin_registry()
        self._filters = filters if filters is not None else create_filter_registry()
        self._parse = parse
        self._options = ShellOptions(nounset=nounset, name=name, interactive=interactive)
        self._context = self._create_context()

    def _create_context(self) -> Context:
        variables: dict[str, str] = {}
        if self._inherit_env:
            variables.update(os.environ)
        variables.setdefault("HOME", os.path.expanduser("~"))
        variables.update(self._env)
        variables["PWD"] = self._cwd

        scope = Scope(
            "global",
            args=[self._options.name],
            vars=dict(variables),
            exported=set(variables),
            last_exit=SUCCESS,
            fds=FDTable.standard(),
        )
        return Context(
            [scope],
            aliases=Registry(self._aliases),
            builtins=Registry(self._builtins),
            filters=Registry(self._filters),
            options=self._options,
            parse=self._parse,
        )

    @property
    def context(self) -> Context:
        """Get the execution context."""
        return self._context

    @property
    def cwd(self) -> str:
        """Get the current working directory ($PWD)."""
        pwd = self._context.get_var("PWD")
        return pwd if isinstance(pwd, str) else self._cwd

    @property
    def last_exit(self) -> int:
        return self._context.last_exit

    def run(self, program: Union[Program, str]) -> RunResult:
        """Execute a program synchronously.

        Errors are printed to the shell's stderr prefixed with its name. In
        non-interactive mode the first error stops the program with exit
        code 1; in interactive mode execution continues with the next
        statement.

        Args:
            program: A parsed Program, or source text if a parser is configured.

        Returns:
            RunResult with the exit code and any errors reported.
        """
        if isinstance(program, str):
            if self._parse is None:
                raise ValueError("running source text requires a parser")
            program = self._parse(program)

        result = RunResult()
        try:
            for statement in program.statements:
                try:
                    result.exit_code = execute_statement(statement, self._context)
                except ShellError as error:
                    self._report(error)
                    result.errors.append(error)
                    result.exit_code = GENERAL_ERROR
                    self._context.register_exit(GENERAL_ERROR)
                    if not self._options.interactive:
                        break
        except ExitError as e:
            result.exit_code = e.exit_code
            result.exited = True
            self._context.register_exit(e.exit_code)
        except KeyboardInterrupt:
            self.interrupt()
            raise
        return result

    async def exec(self, program: Union[Program, str]) -> RunResult:
        """Execute a program without blocking the event loop.

        The program runs on a worker thread; see run().
        """
        return await asyncio.to_thread(self.run, program)

    def _report(self, error: ShellError) -> None:
        logger.debug("statement failed: %s", error)
        message = f"{self._options.name}: {error}\n"
        try:
            stderr = self._context.writer(FD_STDERR)
        except ShellError:
            logger.error(message.rstrip())
            return
        with stderr:
            stderr.write(message)

    def interrupt(self) -> None:
        """Kill tracked child processes and join worker threads."""
        self._context.host.kill_all_processes()
        self._context.host.join_all_threads()

    def reset(self) -> None:
        """Reset the shell state to initial values."""
        self._context.close()
        self._context = self._create_context()
