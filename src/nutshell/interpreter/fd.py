"""File descriptor table.

Descriptors are addressed by small integers (0 stdin, 1 stdout, 2 stderr,
3+ user-addressable). File and AppendFile descriptors are lazy: they are
opened the first time they are used for input or output, after which the
entry holds the open handle and every later use reuses it.

Two kinds of handles are produced:
- raw handles for subprocess.Popen (an int descriptor or an open file)
- owned text streams for builtins, which the caller must close
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import BinaryIO, Iterator, Optional, TextIO, Union

from .errors import (
    ContextCloneFailedError,
    FileNotReadableError,
    FileNotWritableError,
    UnusableForInputError,
    UnusableForOutputError,
)
from .types import FD_STDERR, FD_STDIN, FD_STDOUT

logger = logging.getLogger(__name__)

RawHandle = Union[int, BinaryIO]


class FDKind(Enum):
    STDIN = "stdin"
    STDOUT = "stdout"
    STDERR = "stderr"
    PIPE = "pipe"
    HANDLE = "handle"
    FILE = "file"
    APPEND_FILE = "append_file"


class FileDescriptor:
    """A single I/O endpoint.

    Pipe descriptors made by pipe() do not own their OS descriptors; the
    pipeline that created the pipe closes them. Clones of a pipe descriptor
    own duplicated ends, so a worker thread can keep using them after the
    pipeline has closed its own. Handle descriptors own their file and
    close it in close().
    """

    def __init__(
        self,
        kind: FDKind,
        *,
        path: Optional[str] = None,
        handle: Optional[BinaryIO] = None,
        reader: Optional[int] = None,
        writer: Optional[int] = None,
        owned: bool = False,
    ):
        self.kind = kind
        self.path = path
        self.handle = handle
        self.reader = reader
        self.writer = writer
        self.owned = owned

    @classmethod
    def stdin(cls) -> FileDescriptor:
        return cls(FDKind.STDIN)

    @classmethod
    def stdout(cls) -> FileDescriptor:
        return cls(FDKind.STDOUT)

    @classmethod
    def stderr(cls) -> FileDescriptor:
        return cls(FDKind.STDERR)

    @classmethod
    def pipe(cls, reader: Optional[int] = None, writer: Optional[int] = None) -> FileDescriptor:
        return cls(FDKind.PIPE, reader=reader, writer=writer)

    @classmethod
    def file_handle(cls, handle: BinaryIO) -> FileDescriptor:
        return cls(FDKind.HANDLE, handle=handle, path=getattr(handle, "name", None))

    @classmethod
    def file(cls, path: str) -> FileDescriptor:
        return cls(FDKind.FILE, path=path)

    @classmethod
    def append_file(cls, path: str) -> FileDescriptor:
        return cls(FDKind.APPEND_FILE, path=path)

    def __repr__(self) -> str:
        if self.kind == FDKind.PIPE:
            return f"FileDescriptor(pipe, reader={self.reader}, writer={self.writer})"
        if self.path is not None:
            return f"FileDescriptor({self.kind.value}, path={self.path!r})"
        return f"FileDescriptor({self.kind.value})"

    @property
    def is_lazy(self) -> bool:
        return self.kind in (FDKind.FILE, FDKind.APPEND_FILE)

    def materialize(self, for_output: bool) -> None:
        """Open a lazy File/AppendFile descriptor, turning it into a handle."""
        if not self.is_lazy:
            return
        assert self.path is not None
        if for_output:
            mode = "ab" if self.kind == FDKind.APPEND_FILE else "wb"
            try:
                handle = open(self.path, mode)
            except OSError as e:
                raise FileNotWritableError(self.path, e.strerror or str(e)) from e
        else:
            try:
                handle = open(self.path, "rb")
            except OSError as e:
                raise FileNotReadableError(self.path, e.strerror or str(e)) from e
        logger.debug("opened %s for %s", self.path, "output" if for_output else "input")
        self.kind = FDKind.HANDLE
        self.handle = handle

    # -------------------------------------------------------------------------
    # Raw handles for spawned processes
    # -------------------------------------------------------------------------

    def input(self) -> RawHandle:
        """Return a handle usable as a child process's stdin."""
        self.materialize(for_output=False)
        if self.kind == FDKind.STDIN:
            return FD_STDIN
        if self.kind == FDKind.PIPE:
            if self.reader is None:
                raise UnusableForInputError()
            return self.reader
        if self.kind == FDKind.HANDLE:
            assert self.handle is not None
            return self.handle
        raise UnusableForInputError()

    def output(self) -> RawHandle:
        """Return a handle usable as a child process's stdout or stderr."""
        self.materialize(for_output=True)
        if self.kind == FDKind.STDOUT:
            return FD_STDOUT
        if self.kind == FDKind.STDERR:
            return FD_STDERR
        if self.kind == FDKind.PIPE:
            if self.writer is None:
                raise UnusableForOutputError()
            return self.writer
        if self.kind == FDKind.HANDLE:
            assert self.handle is not None
            return self.handle
        raise UnusableForOutputError()

    # -------------------------------------------------------------------------
    # Owned text streams for builtins
    # -------------------------------------------------------------------------

    def reader_stream(self) -> TextIO:
        """Open a text stream for reading. The caller closes it."""
        raw = self.input()
        if self.kind == FDKind.STDIN:
            return open(FD_STDIN, "r", encoding="utf-8", closefd=False)
        return open(_dup(raw), "r", encoding="utf-8")

    def writer_stream(self) -> TextIO:
        """Open a text stream for writing. The caller closes it."""
        raw = self.output()
        if self.kind in (FDKind.STDOUT, FDKind.STDERR):
            assert isinstance(raw, int)
            return open(raw, "w", encoding="utf-8", closefd=False)
        return open(_dup(raw), "w", encoding="utf-8")

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    def clone(self) -> FileDescriptor:
        """Copy the descriptor. Open handles are duplicated, not shared."""
        if self.kind == FDKind.HANDLE:
            assert self.handle is not None
            try:
                mode = getattr(self.handle, "mode", "rb")
                handle = os.fdopen(os.dup(self.handle.fileno()), mode)
            except OSError as e:
                raise ContextCloneFailedError(str(e)) from e
            return FileDescriptor(FDKind.HANDLE, handle=handle, path=self.path)
        if self.kind == FDKind.PIPE:
            return self._clone_pipe()
        return FileDescriptor(self.kind, path=self.path)

    def _clone_pipe(self) -> FileDescriptor:
        reader = writer = None
        try:
            if self.reader is not None:
                reader = os.dup(self.reader)
            if self.writer is not None:
                writer = os.dup(self.writer)
        except OSError as e:
            if reader is not None:
                os.close(reader)
            raise ContextCloneFailedError(str(e)) from e
        return FileDescriptor(FDKind.PIPE, reader=reader, writer=writer, owned=True)

    def close(self) -> None:
        if self.kind == FDKind.HANDLE and self.handle is not None and not self.handle.closed:
            self.handle.close()
        elif self.kind == FDKind.PIPE and self.owned:
            for end in (self.reader, self.writer):
                if end is not None:
                    os.close(end)
            self.reader = self.writer = None


def _dup(raw: RawHandle) -> int:
    fileno = raw if isinstance(raw, int) else raw.fileno()
    return os.dup(fileno)


class FDTable:
    """File descriptors of one scope, keyed by number."""

    def __init__(self, fds: Optional[dict[int, FileDescriptor]] = None):
        self._fds: dict[int, FileDescriptor] = dict(fds or {})

    @classmethod
    def standard(cls) -> FDTable:
        """Table holding the process's own stdin, stdout and stderr."""
        return cls({
            FD_STDIN: FileDescriptor.stdin(),
            FD_STDOUT: FileDescriptor.stdout(),
            FD_STDERR: FileDescriptor.stderr(),
        })

    def get(self, fd: int) -> Optional[FileDescriptor]:
        return self._fds.get(fd)

    def set(self, fd: int, descriptor: FileDescriptor) -> None:
        previous = self._fds.get(fd)
        if previous is not None and previous is not descriptor:
            previous.close()
        self._fds[fd] = descriptor

    def __contains__(self, fd: int) -> bool:
        return fd in self._fds

    def __iter__(self) -> Iterator[int]:
        return iter(self._fds)

    def __len__(self) -> int:
        return len(self._fds)

    def clone(self) -> FDTable:
        """Create a copy of the table with duplicated handles."""
        return FDTable({fd: entry.clone() for fd, entry in self._fds.items()})

    def close(self) -> None:
        for entry in self._fds.values():
            entry.close()
