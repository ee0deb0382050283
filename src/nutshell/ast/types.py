"""AST node types consumed by the nutshell evaluator.

The parser lives outside this package; it is expected to produce these
nodes. All nodes are immutable once built.

Statements:
- AndOr: pipelines joined by && and ||
- Assignment: NAME=value
- FunctionDef: function name(params...) { body }
- If / While / ForIn / ForOfIn
- SubshellStatement: ( program )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# =============================================================================
# Words
# =============================================================================


@dataclass(frozen=True)
class Literal:
    """An unquoted literal word. Subject to alias and glob expansion."""

    text: str


@dataclass(frozen=True)
class Quoted:
    """A quoted word, taken verbatim."""

    text: str


@dataclass(frozen=True)
class Variable:
    """A variable reference such as $NAME, $1 or $?."""

    name: str


@dataclass(frozen=True)
class Subshell:
    """Command substitution: $(program)."""

    program: "Program"


@dataclass(frozen=True)
class ProcessSubstitution:
    """Process substitution: <(program). Interpolates to a file path."""

    program: "Program"


@dataclass(frozen=True)
class Filter:
    """A named filter with arguments, applied inside a value pipeline."""

    name: "Word"
    args: tuple["Word", ...] = ()


@dataclass(frozen=True)
class ValuePipeline:
    """A variable value passed through filters: ${NAME | filter arg | ...}."""

    base: str
    filters: tuple[Filter, ...] = ()


@dataclass(frozen=True)
class Interpolation:
    """A double-quoted string made of several units."""

    units: tuple["InterpolationUnit", ...] = ()


InterpolationUnit = Union[Literal, Variable, Subshell, ValuePipeline]

Word = Union[
    Literal,
    Quoted,
    Variable,
    Subshell,
    ProcessSubstitution,
    Interpolation,
    ValuePipeline,
]


@dataclass(frozen=True)
class ListLiteral:
    """A list of words, e.g. the right-hand side of NAME = [a b c]."""

    items: tuple[Word, ...] = ()


# =============================================================================
# Commands and pipelines
# =============================================================================


class RedirectMode(Enum):
    WRITE = "write"
    APPEND = "append"


@dataclass(frozen=True)
class FileDescriptorNumber:
    """A numbered redirect endpoint (the 2 in 2>&1)."""

    number: int


@dataclass(frozen=True)
class FileDescriptorFile:
    """A file redirect endpoint."""

    path: Word


RedirectEndpoint = Union[FileDescriptorNumber, FileDescriptorFile]


@dataclass(frozen=True)
class Redirect:
    """Redirect from source to target.

    ``1 > file`` has a numbered source and a file target; ``< file`` has a
    file source and targets descriptor 0.
    """

    source: RedirectEndpoint
    target: RedirectEndpoint
    mode: RedirectMode = RedirectMode.WRITE


@dataclass(frozen=True)
class Command:
    """A simple command: argument words plus redirects."""

    arguments: tuple[Word, ...] = ()
    redirects: tuple[Redirect, ...] = ()


@dataclass(frozen=True)
class Condition:
    """A [[ ... ]] style condition segment."""

    words: tuple[Word, ...] = ()


Segment = Union[Command, Condition]


@dataclass(frozen=True)
class Pipeline:
    """Segments chained by pipes. Runs in the background when is_async."""

    segments: tuple[Segment, ...] = ()
    is_async: bool = False


class AndOrOp(Enum):
    AND = "&&"
    OR = "||"


@dataclass(frozen=True)
class AndOr:
    """Pipelines joined by operators; len(operators) == len(pipelines) - 1."""

    pipelines: tuple[Pipeline, ...] = ()
    operators: tuple[AndOrOp, ...] = ()


# =============================================================================
# Iterables
# =============================================================================


@dataclass(frozen=True)
class NumericRange:
    """Integer range from start to end, ascending or descending.

    The end bound is exclusive unless ``inclusive`` is set.
    """

    start: int
    end: int
    inclusive: bool = False

    def items(self) -> list[str]:
        step = -1 if self.start > self.end else 1
        end = self.end + step if self.inclusive else self.end
        return [str(n) for n in range(self.start, end, step)]


Iterable = Union[ListLiteral, NumericRange]


class IterationRule(Enum):
    """How a for-of loop splits its source word."""

    CHARS = "chars"
    LINES = "lines"
    WORDS = "words"


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class Assignment:
    key: Word
    value: Union[Word, ListLiteral]


@dataclass(frozen=True)
class FunctionDef:
    """A function definition.

    ``list_arg`` names the variadic parameter that collects any arguments
    beyond the fixed ``args``.
    """

    name: str
    args: tuple[str, ...] = ()
    list_arg: Optional[str] = None
    body: "Program" = field(default_factory=lambda: Program())


@dataclass(frozen=True)
class If:
    """if/elif/else. Holds one more branch than conditions when an else exists."""

    conditions: tuple[AndOr, ...] = ()
    branches: tuple["Program", ...] = ()


@dataclass(frozen=True)
class While:
    condition: AndOr
    body: "Program"


@dataclass(frozen=True)
class ForIn:
    """for VAR in <list or range> { body }"""

    variable: str
    iterable: Iterable
    body: "Program"


@dataclass(frozen=True)
class ForOfIn:
    """for VAR of <rule> WORD { body }"""

    variable: str
    rule: IterationRule
    iterable: Word
    body: "Program"


@dataclass(frozen=True)
class SubshellStatement:
    program: "Program"


Statement = Union[AndOr, Assignment, FunctionDef, If, While, ForIn, ForOfIn, SubshellStatement]


@dataclass(frozen=True)
class Program:
    statements: tuple[Statement, ...] = ()
