"""Value filters.

A filter transforms a variable's value inside a value pipeline:

    ${FILES | sort | join ", "}

Filters implement filter_word and/or filter_list. The default
implementations reject the value shape.
"""

from __future__ import annotations

from ..interpreter.errors import InvalidListFilterError, InvalidWordFilterError
from ..interpreter.types import Value


class Filter:
    """Base class for filters."""

    name = ""

    def filter_word(self, word: str, args: list[str]) -> Value:
        raise InvalidWordFilterError()

    def filter_list(self, items: list[str], args: list[str]) -> Value:
        raise InvalidListFilterError()


def apply_filter(filter_: Filter, value: Value, args: list[str]) -> Value:
    """Apply a filter to a word or list value."""
    if isinstance(value, list):
        return filter_.filter_list(list(value), args)
    return filter_.filter_word(value, args)


def create_filter_registry() -> dict[str, Filter]:
    """Create the default name -> filter mapping."""
    from .builtins import FILTERS

    return {filter_.name: filter_ for filter_ in FILTERS}


__all__ = [
    "Filter",
    "apply_filter",
    "create_filter_registry",
]
