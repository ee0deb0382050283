"""AST node types for nutshell."""

from .types import *  # noqa: F401,F403
