"""Shared fixtures."""

import os

import pytest

from nutshell import Shell


@pytest.fixture
def shell(tmp_path):
    """A shell working in tmp_path with a minimal environment."""
    return Shell(
        cwd=str(tmp_path),
        inherit_env=False,
        env={"PATH": os.environ.get("PATH", "/usr/bin:/bin"), "HOME": str(tmp_path)},
    )


@pytest.fixture
def ctx(shell):
    return shell.context
