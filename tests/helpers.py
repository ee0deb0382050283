"""AST building helpers for tests.

The parser is not part of nutshell, so tests build programs directly.
Plain strings become Literal words.
"""

from nutshell.ast import (
    AndOr,
    AndOrOp,
    Command,
    Condition,
    FileDescriptorFile,
    FileDescriptorNumber,
    Literal,
    Pipeline,
    Program,
    Redirect,
    RedirectMode,
)


def word(value):
    return Literal(value) if isinstance(value, str) else value


def cmd(*args, redirects=()):
    return Command(arguments=tuple(word(a) for a in args), redirects=tuple(redirects))


def cond(*args):
    return Condition(words=tuple(word(a) for a in args))


def pipe(*segments, is_async=False):
    return Pipeline(segments=tuple(segments), is_async=is_async)


def stmt(*segments, is_async=False):
    """A statement holding a single pipeline."""
    return AndOr(pipelines=(pipe(*segments, is_async=is_async),))


def and_or(*items):
    """Build an AndOr from alternating segments and "&&"/"||" strings."""
    pipelines = []
    operators = []
    for item in items:
        if item == "&&":
            operators.append(AndOrOp.AND)
        elif item == "||":
            operators.append(AndOrOp.OR)
        else:
            pipelines.append(pipe(item))
    return AndOr(pipelines=tuple(pipelines), operators=tuple(operators))


def program(*statements):
    """Build a Program. Bare segments are wrapped into statements."""
    wrapped = []
    for statement in statements:
        if isinstance(statement, (Command, Condition)):
            statement = stmt(statement)
        wrapped.append(statement)
    return Program(statements=tuple(wrapped))


def to_file(path, fd=1, append=False):
    mode = RedirectMode.APPEND if append else RedirectMode.WRITE
    return Redirect(FileDescriptorNumber(fd), FileDescriptorFile(word(path)), mode)


def from_file(path, fd=0):
    return Redirect(FileDescriptorFile(word(path)), FileDescriptorNumber(fd))


def dup(source, target):
    return Redirect(FileDescriptorNumber(source), FileDescriptorNumber(target))
