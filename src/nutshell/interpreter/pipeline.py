"""Pipeline and process execution.

A pipeline's segments are started left to right. Adjacent segments are
connected with OS pipes: the writer end becomes the left segment's stdout,
the reader end the right segment's stdin. Each segment runs inside a
transparent scope holding its descriptors, so redirects never outlive the
segment while variable writes still reach the caller.

Segments run as:
- external programs (subprocess.Popen)
- builtins and functions, inline for a lone foreground command and on a
  worker thread with a cloned context otherwise
- conditions, evaluated immediately
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import TYPE_CHECKING, Optional, Sequence, Union

from ..ast.types import (
    Command,
    Condition,
    FileDescriptorFile,
    FileDescriptorNumber,
    FunctionDef,
    Pipeline,
    Redirect,
    RedirectMode,
    Segment,
)
from .conditionals import evaluate_condition
from .context import Scope
from .errors import (
    ChildSpawnFailedError,
    CreatePipeFailedError,
    ExitError,
    InvalidRedirectError,
    PipelineFailedError,
    ShellError,
    UndefinedFileDescriptorError,
    UnknownCommandError,
)
from .expansion import expand_words, interpolate_word, lookup_variable, resolve_path
from .fd import FileDescriptor
from .host import WorkerThread
from .types import (
    COMMAND_NOT_FOUND,
    FD_STDERR,
    FD_STDIN,
    FD_STDOUT,
    GENERAL_ERROR,
    SUCCESS,
    Args,
)

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

Handle = Union[int, subprocess.Popen, WorkerThread]


def execute_pipeline(pipeline: Pipeline, ctx: "Context") -> int:
    """Execute a pipeline and return its exit code.

    Synchronous pipelines wait for every segment in start order and report
    the last one's exit code. Asynchronous pipelines hand their processes
    and threads to the Host and report 0.
    """
    segments = list(pipeline.segments)
    if not segments:
        return SUCCESS

    threaded = len(segments) > 1 or pipeline.is_async
    pipes = _create_pipes(len(segments) - 1)

    handles: list[Handle] = []
    failure: Optional[ShellError] = None
    try:
        for index, segment in enumerate(segments):
            ctx.push_scope(Scope.transparent("pipeline"))
            try:
                if index > 0:
                    ctx.set_file_descriptor(FD_STDIN, FileDescriptor.pipe(reader=pipes[index - 1][0]))
                if index < len(pipes):
                    ctx.set_file_descriptor(FD_STDOUT, FileDescriptor.pipe(writer=pipes[index][1]))
                handles.append(_start_segment(segment, ctx, threaded))
            except ShellError as e:
                failure = e
                break
            finally:
                _pop_segment_scope(ctx)
    finally:
        # Started segments hold their own copies of the pipe ends
        _close_pipes(pipes)

    if pipeline.is_async and failure is None:
        for handle in handles:
            if isinstance(handle, subprocess.Popen):
                ctx.host.add_child_process(handle)
            elif isinstance(handle, WorkerThread):
                ctx.host.add_thread(handle)
        return SUCCESS

    exit_code = SUCCESS
    try:
        exit_code = _wait_all(handles)
    except ShellError as e:
        if failure is None:
            raise
        logger.debug("started segment failed after pipeline error: %s", e)

    if isinstance(failure, ChildSpawnFailedError):
        raise PipelineFailedError([failure])
    if failure is not None:
        raise failure
    return exit_code


def _pop_segment_scope(ctx: "Context") -> None:
    # Process substitution files must outlive the segment: the child may
    # not have opened them yet. Hand them to the enclosing scope.
    scope = ctx.scope
    temporary_files, scope.temporary_files = scope.temporary_files, []
    ctx.pop_scope()
    for path in temporary_files:
        ctx.register_temporary_file(path)


def _create_pipes(count: int) -> list[tuple[int, int]]:
    pipes: list[tuple[int, int]] = []
    try:
        for _ in range(count):
            pipes.append(os.pipe())
    except OSError as e:
        _close_pipes(pipes)
        raise CreatePipeFailedError(e.strerror or str(e)) from e
    return pipes


def _close_pipes(pipes: list[tuple[int, int]]) -> None:
    for reader, writer in pipes:
        os.close(reader)
        os.close(writer)


def _wait_all(handles: Sequence[Handle]) -> int:
    """Wait for every handle in order; the last exit code wins.

    An error raised on a worker thread is re-raised once all handles have
    been waited on.
    """
    exit_code = SUCCESS
    error: Optional[BaseException] = None
    for handle in handles:
        try:
            exit_code = _wait(handle)
        except BaseException as e:  # re-raised below
            if error is None:
                error = e
    if error is not None:
        raise error
    return exit_code


def _wait(handle: Handle) -> int:
    if isinstance(handle, int):
        return handle
    if isinstance(handle, subprocess.Popen):
        returncode = handle.wait()
        logger.debug("process %d exited with %d", handle.pid, returncode)
        # Killed by a signal
        if returncode < 0:
            return COMMAND_NOT_FOUND
        return returncode
    return handle.wait()


# =============================================================================
# Segments
# =============================================================================


def _start_segment(segment: Segment, ctx: "Context", threaded: bool) -> Handle:
    if isinstance(segment, Condition):
        return evaluate_condition(ctx, segment)

    assert isinstance(segment, Command)
    apply_redirects(ctx, segment.redirects)
    argv = expand_words(ctx, segment.arguments)
    if not argv:
        return SUCCESS

    name = argv[0]
    builtin = ctx.builtins.get(name)
    if builtin is not None:
        return _run_builtin(builtin, argv, ctx, threaded)

    function = ctx.get_function(name)
    if function is not None:
        return _run_function(function, argv, ctx, threaded)

    path = find_in_path(ctx, name)
    if path is not None:
        return spawn_program(path, argv, ctx)

    raise UnknownCommandError(name)


def _run_builtin(builtin, argv: list[str], ctx: "Context", threaded: bool) -> Handle:
    from .actions import handle_actions

    ctx.replace_args(argv)
    io = ctx.io()

    if not threaded:
        try:
            result = builtin.run(Args(ctx, io))
            return handle_actions(result, ctx, io)
        finally:
            io.close()

    try:
        inner = ctx.clone()
    except BaseException:
        io.close()
        raise

    def work() -> int:
        try:
            with inner:
                result = builtin.run(Args(inner, io))
                return handle_actions(result, inner, io)
        except ExitError as e:
            return e.exit_code
        except BrokenPipeError:
            logger.debug("builtin %s: reader went away", argv[0])
            return GENERAL_ERROR
        finally:
            io.close()

    thread = WorkerThread(work, name=f"builtin-{argv[0]}")
    logger.debug("starting builtin %s on a worker thread", argv[0])
    thread.start()
    return thread


def _run_function(function: FunctionDef, argv: list[str], ctx: "Context", threaded: bool) -> Handle:
    from .interpreter import call_function

    if not threaded:
        return call_function(function, argv[1:], ctx)

    inner = ctx.clone()

    def work() -> int:
        with inner:
            return call_function(function, argv[1:], inner)

    thread = WorkerThread(work, name=f"function-{function.name}")
    logger.debug("starting function %s on a worker thread", function.name)
    thread.start()
    return thread


def spawn_program(path: str, argv: list[str], ctx: "Context") -> subprocess.Popen:
    """Start an external program with the context's descriptors.

    Only exported variables reach the child's environment, and the child
    starts in $PWD.
    """
    stdin = ctx.input(FD_STDIN)
    stdout = ctx.output(FD_STDOUT)
    stderr = ctx.output(FD_STDERR)

    cwd = lookup_variable(ctx, "PWD")
    if not isinstance(cwd, str) or not os.path.isdir(cwd):
        cwd = None

    try:
        process = subprocess.Popen(
            argv,
            executable=path,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            env=ctx.exported_vars(),
            cwd=cwd,
        )
    except OSError as e:
        raise ChildSpawnFailedError(f"{argv[0]}: {e.strerror or e}") from e

    logger.debug("spawned %s as process %d", path, process.pid)
    return process


# =============================================================================
# Command resolution
# =============================================================================


def find_in_path(ctx: "Context", name: str) -> Optional[str]:
    """Find an executable by name.

    Names containing a slash are resolved against $PWD. Other names are
    searched for in $PATH, trying each $PATHEXT extension when set.
    """
    if not name:
        return None
    if "/" in name:
        path = resolve_path(ctx, name)
        return path if _is_executable(path) else None

    extensions = [""]
    pathext = lookup_variable(ctx, "PATHEXT")
    if isinstance(pathext, str) and pathext:
        extensions.extend(ext for ext in pathext.split(";") if ext)

    search_path = lookup_variable(ctx, "PATH")
    if not isinstance(search_path, str):
        return None

    for directory in search_path.split(os.pathsep):
        if not directory:
            continue
        for extension in extensions:
            candidate = os.path.join(directory, name + extension)
            if _is_executable(candidate):
                return candidate
    return None


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


# =============================================================================
# Redirects
# =============================================================================


def apply_redirects(ctx: "Context", redirects: Sequence[Redirect]) -> None:
    """Apply redirects to the innermost scope's descriptor table.

    - N > M copies descriptor M into slot N
    - N > file installs a lazy file (or append file) in slot N
    - file > N installs a lazy file for reading in slot N
    """
    for redirect in redirects:
        source, target = redirect.source, redirect.target

        if isinstance(source, FileDescriptorNumber) and isinstance(target, FileDescriptorNumber):
            descriptor = ctx.get_file_descriptor(target.number)
            if descriptor is None:
                raise UndefinedFileDescriptorError(target.number)
            if descriptor.is_lazy:
                # Both slots must share one open file
                descriptor.materialize(for_output=source.number != FD_STDIN)
            ctx.set_file_descriptor(source.number, descriptor.clone())

        elif isinstance(source, FileDescriptorNumber) and isinstance(target, FileDescriptorFile):
            path = resolve_path(ctx, interpolate_word(ctx, target.path))
            if redirect.mode == RedirectMode.APPEND:
                ctx.set_file_descriptor(source.number, FileDescriptor.append_file(path))
            else:
                ctx.set_file_descriptor(source.number, FileDescriptor.file(path))

        elif isinstance(source, FileDescriptorFile) and isinstance(target, FileDescriptorNumber):
            path = resolve_path(ctx, interpolate_word(ctx, source.path))
            ctx.set_file_descriptor(target.number, FileDescriptor.file(path))

        else:
            raise InvalidRedirectError()
