"""Execution context: the scope stack plus shell-wide registries.

Scopes hold variables, functions, exported names, the last exit code, a
file descriptor table and temporary files. Reads walk the stack from the
innermost scope outwards; writes always go to the innermost scope.

Variable and function maps are tri-state per name:
- missing: look further out
- a value: defined here
- None: unset here, hiding any outer definition

A scope may also carry no variable map at all (``vars=None``). Such a scope
is transparent for variables: reads and writes pass through to the next
scope that has one. Sourced files and pipeline segments use these so that
assignments land in the caller's scope. The same applies to functions.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, Iterator, Optional, TextIO, TypeVar

from .errors import (
    ListNotExportableError,
    UndefinedFileDescriptorError,
    UnknownVariableError,
)
from .fd import FDTable, FileDescriptor, RawHandle
from .host import Host
from .types import Io, ShellOptions, Value, FD_STDERR, FD_STDIN, FD_STDOUT

if TYPE_CHECKING:
    from ..ast.types import FunctionDef, Program

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Scope:
    """One frame of the scope stack."""

    name: str
    """Diagnostic name (function name, file name, "global", ...)."""

    args: Optional[list[str]] = None
    """Positional arguments. None inherits the enclosing scope's."""

    vars: Optional[dict[str, Optional[Value]]] = field(default_factory=dict)
    """Variables defined (or unset) in this scope. None makes the scope transparent."""

    functions: Optional[dict[str, Optional["FunctionDef"]]] = field(default_factory=dict)
    """Functions defined (or unset) in this scope. None makes the scope transparent."""

    exported: set[str] = field(default_factory=set)
    """Names marked for export to child processes."""

    last_exit: Optional[int] = None
    """Last reported exit code. None inherits the enclosing scope's."""

    fds: FDTable = field(default_factory=FDTable)
    """File descriptors set in this scope."""

    temporary_files: list[str] = field(default_factory=list)
    """Files deleted when the scope is closed."""

    @classmethod
    def transparent(cls, name: str, args: Optional[list[str]] = None) -> Scope:
        """A scope that owns neither variables nor functions."""
        return cls(name=name, args=args, vars=None, functions=None)

    def register_temporary_file(self, path: str) -> None:
        self.temporary_files.append(path)

    def clone(self) -> Scope:
        """Copy the scope. Temporary files stay owned by the original."""
        vars = None
        if self.vars is not None:
            vars = {
                name: list(value) if isinstance(value, list) else value
                for name, value in self.vars.items()
            }
        return Scope(
            name=self.name,
            args=list(self.args) if self.args is not None else None,
            vars=vars,
            functions=dict(self.functions) if self.functions is not None else None,
            exported=set(self.exported),
            last_exit=self.last_exit,
            fds=self.fds.clone(),
        )

    def close(self) -> None:
        """Close open descriptors and delete temporary files."""
        self.fds.close()
        for path in self.temporary_files:
            try:
                os.remove(path)
                logger.debug("removed temporary file %s", path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("could not remove temporary file %s: %s", path, e)
        self.temporary_files.clear()


class Registry(Generic[T]):
    """A lock-guarded name table shared between threads.

    Used for aliases, builtins and filters.
    """

    def __init__(self, items: Optional[dict[str, T]] = None):
        self._lock = threading.RLock()
        self._items: dict[str, T] = dict(items or {})

    def get(self, name: str) -> Optional[T]:
        with self._lock:
            return self._items.get(name)

    def insert(self, name: str, item: T) -> None:
        with self._lock:
            self._items[name] = item

    def remove(self, name: str) -> Optional[T]:
        with self._lock:
            return self._items.pop(name, None)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._items)

    def items(self) -> list[tuple[str, T]]:
        with self._lock:
            return sorted(self._items.items(), key=lambda item: item[0])

    def copy(self) -> Registry[T]:
        with self._lock:
            return Registry(self._items)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class Context:
    """The complete execution state."""

    def __init__(
        self,
        scopes: Optional[list[Scope]] = None,
        *,
        aliases: Optional[Registry[str]] = None,
        builtins: Optional[Registry] = None,
        filters: Optional[Registry] = None,
        host: Optional[Host] = None,
        options: Optional[ShellOptions] = None,
        parse: Optional[Callable[[str], "Program"]] = None,
    ):
        if scopes is None:
            scopes = [Scope("global", args=[], last_exit=0, fds=FDTable.standard())]
        self.scopes: list[Scope] = scopes
        self.aliases: Registry[str] = aliases if aliases is not None else Registry()
        self.builtins: Registry = builtins if builtins is not None else Registry()
        self.filters: Registry = filters if filters is not None else Registry()
        self.host = host if host is not None else Host()
        self.options = options if options is not None else ShellOptions()
        self.parse = parse

    # =========================================================================
    # Scopes
    # =========================================================================

    def push_scope(self, scope: Scope) -> None:
        self.scopes.append(scope)

    def pop_scope(self) -> Scope:
        """Remove the innermost scope, closing its descriptors and temp files."""
        scope = self.scopes.pop()
        logger.debug("popping scope %s", scope.name)
        scope.close()
        return scope

    @property
    def scope(self) -> Scope:
        return self.scopes[-1]

    def _var_scope(self) -> Scope:
        for scope in reversed(self.scopes):
            if scope.vars is not None:
                return scope
        raise RuntimeError("no scope owns variables")

    def _function_scope(self) -> Scope:
        for scope in reversed(self.scopes):
            if scope.functions is not None:
                return scope
        raise RuntimeError("no scope owns functions")

    # =========================================================================
    # Variables
    # =========================================================================

    def get_var(self, name: str) -> Optional[Value]:
        for scope in reversed(self.scopes):
            if scope.vars is not None and name in scope.vars:
                return scope.vars[name]
        return None

    def set_var(self, name: str, value: Value) -> None:
        vars = self._var_scope().vars
        assert vars is not None
        vars[name] = value

    def unset_var(self, name: str) -> None:
        vars = self._var_scope().vars
        assert vars is not None
        vars[name] = None

    def export_var(self, name: str) -> None:
        """Mark a variable for export to child processes."""
        value = self.get_var(name)
        if value is None:
            raise UnknownVariableError(name)
        if isinstance(value, list):
            raise ListNotExportableError(name)
        self._var_scope().exported.add(name)

    def exported_vars(self) -> dict[str, str]:
        """Exported variables that currently resolve to a word."""
        names: set[str] = set()
        for scope in self.scopes:
            names.update(scope.exported)
        exported = {}
        for name in sorted(names):
            value = self.get_var(name)
            if isinstance(value, str):
                exported[name] = value
        return exported

    def var_names(self) -> list[str]:
        """Names of all variables visible from the innermost scope."""
        return sorted(name for name in self._visible(lambda s: s.vars))

    # =========================================================================
    # Functions
    # =========================================================================

    def get_function(self, name: str) -> Optional["FunctionDef"]:
        for scope in reversed(self.scopes):
            if scope.functions is not None and name in scope.functions:
                return scope.functions[name]
        return None

    def register_function(self, function: "FunctionDef") -> None:
        functions = self._function_scope().functions
        assert functions is not None
        functions[function.name] = function

    def unregister_function(self, name: str) -> None:
        functions = self._function_scope().functions
        assert functions is not None
        functions[name] = None

    def function_names(self) -> list[str]:
        return sorted(name for name in self._visible(lambda s: s.functions))

    def _visible(self, table: Callable[[Scope], Optional[dict]]) -> Iterator[str]:
        seen: set[str] = set()
        for scope in reversed(self.scopes):
            entries = table(scope)
            if entries is None:
                continue
            for name, value in entries.items():
                if name in seen:
                    continue
                seen.add(name)
                if value is not None:
                    yield name

    # =========================================================================
    # Arguments and exit codes
    # =========================================================================

    def args(self) -> list[str]:
        for scope in reversed(self.scopes):
            if scope.args is not None:
                return scope.args
        raise RuntimeError("no scope holds positional arguments")

    def replace_args(self, args: list[str]) -> None:
        self.scope.args = args

    @property
    def last_exit(self) -> int:
        for scope in reversed(self.scopes):
            if scope.last_exit is not None:
                return scope.last_exit
        raise RuntimeError("no scope holds an exit code")

    def register_exit(self, exit_code: int) -> None:
        self.scope.last_exit = exit_code

    # =========================================================================
    # Temporary files
    # =========================================================================

    def register_temporary_file(self, path: str) -> None:
        self.scope.register_temporary_file(path)

    # =========================================================================
    # File descriptors
    # =========================================================================

    def get_file_descriptor(self, fd: int) -> Optional[FileDescriptor]:
        for scope in reversed(self.scopes):
            descriptor = scope.fds.get(fd)
            if descriptor is not None:
                return descriptor
        return None

    def set_file_descriptor(self, fd: int, descriptor: FileDescriptor) -> None:
        self.scope.fds.set(fd, descriptor)

    def _require(self, fd: int) -> FileDescriptor:
        descriptor = self.get_file_descriptor(fd)
        if descriptor is None:
            raise UndefinedFileDescriptorError(fd)
        return descriptor

    def input(self, fd: int) -> RawHandle:
        return self._require(fd).input()

    def output(self, fd: int) -> RawHandle:
        return self._require(fd).output()

    def reader(self, fd: int) -> TextIO:
        return self._require(fd).reader_stream()

    def writer(self, fd: int) -> TextIO:
        return self._require(fd).writer_stream()

    def io(self) -> Io:
        """Open owned text streams for descriptors 0, 1 and 2."""
        stdin = self.reader(FD_STDIN)
        try:
            stdout = self.writer(FD_STDOUT)
        except BaseException:
            stdin.close()
            raise
        try:
            stderr = self.writer(FD_STDERR)
        except BaseException:
            stdin.close()
            stdout.close()
            raise
        return Io(stdin=stdin, stdout=stdout, stderr=stderr)

    # =========================================================================
    # Cloning
    # =========================================================================

    def clone(self) -> Context:
        """Copy the context for a subshell.

        Scopes, descriptor tables and registries are copied; the Host is
        shared.
        """
        scopes: list[Scope] = []
        try:
            for scope in self.scopes:
                scopes.append(scope.clone())
        except BaseException:
            for scope in scopes:
                scope.close()
            raise
        return Context(
            scopes,
            aliases=self.aliases.copy(),
            builtins=self.builtins.copy(),
            filters=self.filters.copy(),
            host=self.host,
            options=self.options,
            parse=self.parse,
        )

    def close(self) -> None:
        """Pop every scope."""
        while self.scopes:
            self.pop_scope()

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
