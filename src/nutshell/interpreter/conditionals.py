"""Condition segment evaluation.

A condition segment's words are interpolated and then read as one of:

String operators:
  -z STRING      True if STRING is empty
  -n STRING      True if STRING is not empty
  STRING         True if STRING is not empty
  S1 == S2       True if strings are equal (also S1 = S2)
  S1 != S2       True if strings are not equal
  S1 =~ REGEX    True if REGEX matches somewhere in S1

File operators (paths are resolved against $PWD):
  -e PATH, is-path PATH   True if PATH exists
  -f PATH, is-file PATH   True if PATH is a regular file
  -d PATH, is-dir PATH    True if PATH is a directory

Logical operators:
  ! CONDITION    True if CONDITION is false
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING, Sequence

from .errors import InvalidConditionError, InvalidRegexError
from .expansion import interpolate_word, resolve_path

if TYPE_CHECKING:
    from ..ast.types import Condition
    from .context import Context


_FILE_TESTS = {
    "-e": os.path.exists,
    "is-path": os.path.exists,
    "-f": os.path.isfile,
    "is-file": os.path.isfile,
    "-d": os.path.isdir,
    "is-dir": os.path.isdir,
}


def evaluate_condition(ctx: "Context", condition: "Condition") -> int:
    """Evaluate a condition segment to exit code 0 (true) or 1 (false)."""
    words = [interpolate_word(ctx, word) for word in condition.words]
    return 0 if evaluate_words(ctx, words) else 1


def evaluate_words(ctx: "Context", words: Sequence[str]) -> bool:
    """Evaluate already-interpolated condition words."""
    if words and words[0] == "!":
        return not evaluate_words(ctx, words[1:])

    if len(words) == 3:
        left, op, right = words
        if op in ("==", "="):
            return left == right
        if op == "!=":
            return left != right
        if op == "=~":
            try:
                return re.search(right, left) is not None
            except re.error as e:
                raise InvalidRegexError(right, str(e)) from e

    if len(words) == 2:
        op, operand = words
        if op == "-z":
            return operand == ""
        if op == "-n":
            return operand != ""
        if op in _FILE_TESTS:
            return _FILE_TESTS[op](resolve_path(ctx, operand))

    if len(words) == 1:
        return words[0] != ""

    raise InvalidConditionError(words)
