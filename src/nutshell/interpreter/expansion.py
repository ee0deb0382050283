"""Word Expansion.

Handles turning words into strings:
- variables ($NAME, $1, $?, $$)
- command substitution $(...) and process substitution <(...)
- double-quoted interpolations
- value pipelines ${NAME | filter ...}
- alias expansion of the command name
- tilde and glob expansion of literal words
"""

from __future__ import annotations

import logging
import os
import re
import sys
import tempfile
from typing import TYPE_CHECKING, Mapping, Optional, Sequence, Union

from ..ast.types import (
    Interpolation,
    Literal,
    ProcessSubstitution,
    Program,
    Quoted,
    Subshell,
    ValuePipeline,
    Variable,
    Word,
)
from .errors import (
    InvalidListInterpolationError,
    ShellIOError,
    UndefinedVariableError,
    UnknownFilterError,
)
from .fd import FileDescriptor
from .types import FD_STDOUT, Value

if TYPE_CHECKING:
    from .context import Context, Registry

logger = logging.getLogger(__name__)

LIVE_VARIABLES = {
    "HOME": lambda: os.path.expanduser("~"),
    "PWD": os.getcwd,
    "SHELL": lambda: os.path.abspath(sys.argv[0]) if sys.argv and sys.argv[0] else sys.executable,
}


# =============================================================================
# Variables
# =============================================================================


def lookup_variable(ctx: "Context", name: str) -> Optional[Value]:
    """Resolve a variable name without applying the unset policy.

    Lookup order: positional index, $ and ?, the scope stack, then HOME,
    PWD and SHELL computed from the running process.
    """
    if name.isdigit():
        args = ctx.args()
        index = int(name)
        return args[index] if index < len(args) else None
    if name == "$":
        return str(ctx.host.process_id())
    if name == "?":
        return str(ctx.last_exit)

    value = ctx.get_var(name)
    if value is None and name in LIVE_VARIABLES:
        return LIVE_VARIABLES[name]()
    return value


def get_variable(ctx: "Context", name: str) -> Value:
    """Resolve a variable, applying the nounset option to missing names."""
    value = lookup_variable(ctx, name)
    if value is None:
        if ctx.options.nounset:
            raise UndefinedVariableError(name)
        return ""
    return value


def interpolate_variable(ctx: "Context", name: str) -> str:
    value = get_variable(ctx, name)
    if isinstance(value, list):
        raise InvalidListInterpolationError(name)
    return value


# =============================================================================
# Substitutions
# =============================================================================


def _create_temporary_file() -> tuple[int, str]:
    try:
        return tempfile.mkstemp(prefix="nutshell_", suffix="_stdout")
    except OSError as e:
        raise ShellIOError(e.strerror or str(e)) from e


def interpolate_subshell(ctx: "Context", program: Program) -> str:
    """Run a program in a cloned context and return what it wrote to stdout.

    A single trailing line terminator (LF or CRLF) is removed.
    """
    from .interpreter import execute_subshell

    fd, path = _create_temporary_file()
    capture = FileDescriptor.file_handle(os.fdopen(fd, "wb"))
    try:
        inner = ctx.clone()
        with inner:
            inner.set_file_descriptor(FD_STDOUT, capture)
            execute_subshell(program, inner)
        with open(path, "rb") as f:
            contents = f.read().decode("utf-8", errors="replace")
    finally:
        capture.close()
        os.remove(path)

    if contents.endswith("\n"):
        contents = contents[:-1]
        if contents.endswith("\r"):
            contents = contents[:-1]
    return contents


def substitute_process(ctx: "Context", program: Program) -> str:
    """Run a program with stdout going to a temporary file and return its path.

    The file belongs to the caller's innermost scope and is removed when
    that scope is popped.
    """
    from .interpreter import execute_subshell

    fd, path = _create_temporary_file()
    os.close(fd)
    ctx.register_temporary_file(path)

    inner = ctx.clone()
    with inner:
        inner.set_file_descriptor(FD_STDOUT, FileDescriptor.file(path))
        execute_subshell(program, inner)
    return path


# =============================================================================
# Value pipelines
# =============================================================================


def evaluate_value_pipeline(ctx: "Context", pipeline: ValuePipeline) -> Value:
    """Apply a value pipeline's filters, in order, to its base variable."""
    from ..filters import apply_filter

    value = get_variable(ctx, pipeline.base)
    for filter_node in pipeline.filters:
        name = interpolate_word(ctx, filter_node.name)
        filter_ = ctx.filters.get(name)
        if filter_ is None:
            raise UnknownFilterError(name)
        args = [interpolate_word(ctx, arg) for arg in filter_node.args]
        value = apply_filter(filter_, value, args)
    return value


# =============================================================================
# Words
# =============================================================================


def interpolate_value(ctx: "Context", word: Word) -> Value:
    """Interpolate a word, keeping list values intact."""
    if isinstance(word, Variable):
        return get_variable(ctx, word.name)
    if isinstance(word, ValuePipeline):
        return evaluate_value_pipeline(ctx, word)
    return interpolate_word(ctx, word)


def interpolate_word(ctx: "Context", word: Union[Word, Interpolation]) -> str:
    """Interpolate a word into a single string."""
    if isinstance(word, (Literal, Quoted)):
        return word.text
    if isinstance(word, Variable):
        return interpolate_variable(ctx, word.name)
    if isinstance(word, Subshell):
        return interpolate_subshell(ctx, word.program)
    if isinstance(word, ProcessSubstitution):
        return substitute_process(ctx, word.program)
    if isinstance(word, Interpolation):
        return "".join(interpolate_word(ctx, unit) for unit in word.units)
    if isinstance(word, ValuePipeline):
        value = evaluate_value_pipeline(ctx, word)
        if isinstance(value, list):
            raise InvalidListInterpolationError(word.base)
        return value
    raise TypeError(f"cannot interpolate {type(word).__name__}")


def expand_words(ctx: "Context", words: Sequence[Word]) -> list[str]:
    """Expand command words into arguments.

    Literal words go through alias expansion (command name only) and glob
    expansion. Variables and value pipelines holding lists expand to one
    argument per item.
    """
    expanded: list[str] = []
    for index, word in enumerate(words):
        if isinstance(word, Literal):
            literals = [word.text]
            if index == 0:
                literals = expand_aliases(literals, ctx.aliases)
            for literal in literals:
                expanded.extend(expand_glob(ctx, literal))
            continue

        value = interpolate_value(ctx, word)
        if isinstance(value, list):
            expanded.extend(value)
        else:
            expanded.append(value)
    return expanded


# =============================================================================
# Aliases
# =============================================================================


def expand_aliases(
    words: Sequence[str], aliases: Union["Registry[str]", Mapping[str, str]]
) -> list[str]:
    """Replace the leading word with its alias expansion, repeatedly.

    Each alias is substituted at most once, so cycles stop at the repeated
    name. An alias value ending in whitespace stops further expansion.
    """
    words = list(words)
    seen: set[str] = set()
    while words:
        head = words[0]
        if head in seen:
            break
        value = aliases.get(head)
        if value is None:
            break
        seen.add(head)
        words = value.split() + words[1:]
        if not value or value[-1].isspace():
            break
    return words


# =============================================================================
# Tilde and globs
# =============================================================================


def expand_tilde(ctx: "Context", word: str) -> str:
    """Replace a leading ~ with $HOME."""
    if not word.startswith("~"):
        return word
    home = lookup_variable(ctx, "HOME")
    if not isinstance(home, str):
        home = "/"
    return home + word[1:]


def resolve_path(ctx: "Context", path: str) -> str:
    """Resolve a path against $PWD."""
    if os.path.isabs(path):
        return path
    pwd = lookup_variable(ctx, "PWD")
    if not isinstance(pwd, str):
        pwd = os.getcwd()
    return os.path.normpath(os.path.join(pwd, path))


def _glob_pattern(part: str) -> re.Pattern:
    # Everything but * matches literally
    return re.compile(".*".join(re.escape(chunk) for chunk in part.split("*")), re.DOTALL)


def expand_glob(ctx: "Context", word: str) -> list[str]:
    """Expand a literal word against the filesystem.

    Only * is a wildcard. Dotfiles are never matched. A word whose
    directories do not exist, or that matches nothing, is returned as-is.
    """
    word = expand_tilde(ctx, word)
    if "*" not in word:
        return [word]

    if word.startswith("/"):
        base_dir, prefix = "/", "/"
        parts = word[1:].split("/")
    else:
        base_dir, prefix = resolve_path(ctx, "."), ""
        parts = word.split("/")

    def expand_parts(current_dir: str, shown: str, remaining: list[str]) -> list[str]:
        if not remaining:
            return [shown]
        part, rest = remaining[0], remaining[1:]

        if "*" not in part:
            path = os.path.join(current_dir, part)
            if rest and not os.path.isdir(path):
                return []
            if not rest and not os.path.lexists(path):
                return []
            return expand_parts(path, shown + part + ("/" if rest else ""), rest)

        try:
            entries = os.listdir(current_dir)
        except OSError:
            return []

        pattern = _glob_pattern(part)
        matches: list[str] = []
        for entry in sorted(entries):
            if entry.startswith(".") or not pattern.fullmatch(entry):
                continue
            path = os.path.join(current_dir, entry)
            if rest:
                if os.path.isdir(path):
                    matches.extend(expand_parts(path, shown + entry + "/", rest))
            else:
                matches.append(shown + entry)
        return matches

    results = expand_parts(base_dir, prefix, parts)
    if not results:
        return [word]
    return sorted(results)


# =============================================================================
# Free-text interpolation
# =============================================================================

_VARIABLE_PATTERN = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*|[0-9]+|[?$])\}"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*|[0-9?$]))"
)


def parse_interpolation(text: str) -> Interpolation:
    """Parse free text into an Interpolation.

    Recognizes $NAME, ${NAME}, $?, $$ and $0-$9. Any other $ is literal.
    """
    units: list[Union[Literal, Variable]] = []
    position = 0
    for match in _VARIABLE_PATTERN.finditer(text):
        if match.start() > position:
            units.append(Literal(text[position:match.start()]))
        units.append(Variable(match.group("braced") or match.group("name")))
        position = match.end()
    if position < len(text):
        units.append(Literal(text[position:]))
    return Interpolation(tuple(units))
