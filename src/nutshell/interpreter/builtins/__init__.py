"""Builtin commands.

A builtin is any object with a ``name`` attribute and a
``run(args: Args) -> CommandResult`` method.
"""

from .alias import AliasCommand, UnaliasCommand
from .cd import CdCommand
from .control import ExitCommand
from .export import ExportCommand
from .interpolate import InterpolateCommand
from .lookup import TypeCommand, WhichCommand
from .misc import EchoCommand, FalseCommand, PwdCommand, SleepCommand, TrueCommand
from .source import DotCommand, SourceCommand
from .unset import UnsetCommand

BUILTINS = [
    AliasCommand(),
    UnaliasCommand(),
    CdCommand(),
    EchoCommand(),
    ExitCommand(),
    ExportCommand(),
    FalseCommand(),
    InterpolateCommand(),
    PwdCommand(),
    SleepCommand(),
    SourceCommand(),
    DotCommand(),
    TrueCommand(),
    TypeCommand(),
    UnsetCommand(),
    WhichCommand(),
]


def create_builtin_registry() -> dict:
    """Create the default name -> builtin mapping."""
    return {builtin.name: builtin for builtin in BUILTINS}


__all__ = [
    "BUILTINS",
    "create_builtin_registry",
    "AliasCommand",
    "UnaliasCommand",
    "CdCommand",
    "EchoCommand",
    "ExitCommand",
    "ExportCommand",
    "FalseCommand",
    "InterpolateCommand",
    "PwdCommand",
    "SleepCommand",
    "SourceCommand",
    "DotCommand",
    "TrueCommand",
    "TypeCommand",
    "UnsetCommand",
    "WhichCommand",
]
