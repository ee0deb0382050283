"""Builtin filters.

List filters: first, last, nth, join, len, reverse, sort, unique, replace
Word filters: lines, words, split, lowercase, uppercase, ucfirst, replace
"""

from __future__ import annotations

from ..interpreter.errors import (
    InvalidArgsError,
    MissingArgError,
    NoArgsAllowedError,
    NoSuchValueError,
    TooManyArgsError,
)
from ..interpreter.types import Value
from . import Filter


def _no_args(args: list[str]) -> None:
    if args:
        raise NoArgsAllowedError()


def _one_arg(args: list[str], name: str) -> str:
    if not args:
        raise MissingArgError(name)
    if len(args) > 1:
        raise TooManyArgsError()
    return args[0]


def _two_args(args: list[str], first: str, second: str) -> tuple[str, str]:
    if not args:
        raise MissingArgError(first)
    if len(args) == 1:
        raise MissingArgError(second)
    if len(args) > 2:
        raise TooManyArgsError()
    return args[0], args[1]


class FirstFilter(Filter):
    name = "first"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        if not items:
            raise NoSuchValueError()
        return items[0]


class LastFilter(Filter):
    name = "last"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        if not items:
            raise NoSuchValueError()
        return items[-1]


class NthFilter(Filter):
    """Zero-based item lookup."""

    name = "nth"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        raw = _one_arg(args, "index")
        try:
            index = int(raw)
        except ValueError:
            raise InvalidArgsError(f"invalid index: {raw}") from None
        if index < 0:
            raise InvalidArgsError(f"invalid index: {raw}")
        if index >= len(items):
            raise NoSuchValueError()
        return items[index]


class JoinFilter(Filter):
    name = "join"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        return _one_arg(args, "separator").join(items)


class LenFilter(Filter):
    name = "len"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        return str(len(items))

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return str(len(word))


class ReverseFilter(Filter):
    name = "reverse"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        return items[::-1]


class SortFilter(Filter):
    name = "sort"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        return sorted(items)


class UniqueFilter(Filter):
    """Drop repeated items, keeping the first occurrence."""

    name = "unique"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        _no_args(args)
        return list(dict.fromkeys(items))


class ReplaceFilter(Filter):
    """Replace substrings in a word, or whole items in a list."""

    name = "replace"

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        old, new = _two_args(args, "from", "to")
        return [new if item == old else item for item in items]

    def filter_word(self, word: str, args: list[str]) -> Value:
        old, new = _two_args(args, "from", "to")
        return word.replace(old, new)


class LinesFilter(Filter):
    name = "lines"

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return word.splitlines()


class WordsFilter(Filter):
    name = "words"

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return word.split()


class SplitFilter(Filter):
    name = "split"

    def filter_word(self, word: str, args: list[str]) -> Value:
        separator = _one_arg(args, "separator")
        if not separator:
            raise InvalidArgsError("empty separator")
        return word.split(separator)


class LowercaseFilter(Filter):
    name = "lowercase"

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return word.lower()


class UppercaseFilter(Filter):
    name = "uppercase"

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return word.upper()


class UcfirstFilter(Filter):
    name = "ucfirst"

    def filter_word(self, word: str, args: list[str]) -> Value:
        _no_args(args)
        return word[:1].upper() + word[1:]


FILTERS: list[Filter] = [
    FirstFilter(),
    LastFilter(),
    NthFilter(),
    JoinFilter(),
    LenFilter(),
    ReverseFilter(),
    SortFilter(),
    UniqueFilter(),
    ReplaceFilter(),
    LinesFilter(),
    WordsFilter(),
    SplitFilter(),
    LowercaseFilter(),
    UppercaseFilter(),
    UcfirstFilter(),
]
