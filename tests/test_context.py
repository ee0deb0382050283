"""Tests for the scope stack."""

import os

import pytest

from nutshell.ast import FunctionDef
from nutshell.interpreter import Context, FileDescriptor, Registry, Scope
from nutshell.interpreter.errors import ListNotExportableError, UnknownVariableError


class TestVariables:
    """Test variable reads, writes and shadowing."""

    def test_set_and_get(self):
        ctx = Context()
        ctx.set_var("X", "1")
        assert ctx.get_var("X") == "1"

    def test_inner_scope_shadows_outer(self):
        ctx = Context()
        ctx.set_var("X", "outer")
        ctx.push_scope(Scope("inner"))
        ctx.set_var("X", "inner")
        assert ctx.get_var("X") == "inner"
        ctx.pop_scope()
        assert ctx.get_var("X") == "outer"

    def test_reads_walk_outwards(self):
        ctx = Context()
        ctx.set_var("X", "outer")
        ctx.push_scope(Scope("inner"))
        assert ctx.get_var("X") == "outer"

    def test_unset_tombstone_hides_outer_value(self):
        ctx = Context()
        ctx.set_var("X", "outer")
        ctx.push_scope(Scope("inner"))
        ctx.unset_var("X")
        assert ctx.get_var("X") is None
        assert "X" not in ctx.var_names()
        ctx.pop_scope()
        assert ctx.get_var("X") == "outer"

    def test_transparent_scope_writes_to_owner(self):
        ctx = Context()
        ctx.push_scope(Scope.transparent("sourced"))
        ctx.set_var("X", "1")
        ctx.pop_scope()
        assert ctx.get_var("X") == "1"

    def test_list_values(self):
        ctx = Context()
        ctx.set_var("L", ["a", "b"])
        assert ctx.get_var("L") == ["a", "b"]

    def test_var_names_sorted_and_unique(self):
        ctx = Context()
        ctx.set_var("B", "1")
        ctx.set_var("A", "1")
        ctx.push_scope(Scope("inner"))
        ctx.set_var("A", "2")
        assert ctx.var_names() == ["A", "B"]


class TestExport:
    """Test exporting variables."""

    def test_export_word(self):
        ctx = Context()
        ctx.set_var("X", "1")
        ctx.export_var("X")
        assert ctx.exported_vars() == {"X": "1"}

    def test_export_unknown_variable_fails(self):
        ctx = Context()
        with pytest.raises(UnknownVariableError) as exc_info:
            ctx.export_var("NOPE")
        assert str(exc_info.value) == "unknown variable: NOPE"

    def test_export_list_fails(self):
        ctx = Context()
        ctx.set_var("L", ["a"])
        with pytest.raises(ListNotExportableError):
            ctx.export_var("L")

    def test_exported_value_follows_shadowing(self):
        ctx = Context()
        ctx.set_var("X", "outer")
        ctx.export_var("X")
        ctx.push_scope(Scope("inner"))
        ctx.set_var("X", "inner")
        assert ctx.exported_vars() == {"X": "inner"}

    def test_exported_but_unset_is_skipped(self):
        ctx = Context()
        ctx.set_var("X", "1")
        ctx.export_var("X")
        ctx.push_scope(Scope("inner"))
        ctx.unset_var("X")
        assert ctx.exported_vars() == {}


class TestFunctions:
    """Test function registration and shadowing."""

    def test_register_and_get(self):
        ctx = Context()
        function = FunctionDef(name="f")
        ctx.register_function(function)
        assert ctx.get_function("f") is function

    def test_unregister_shadows_outer(self):
        ctx = Context()
        ctx.register_function(FunctionDef(name="f"))
        ctx.push_scope(Scope("inner"))
        ctx.unregister_function("f")
        assert ctx.get_function("f") is None
        assert ctx.function_names() == []
        ctx.pop_scope()
        assert ctx.get_function("f") is not None


class TestArgsAndExitCodes:
    """Test positional arguments and exit codes."""

    def test_args_inherited(self):
        ctx = Context()
        ctx.replace_args(["shell", "a"])
        ctx.push_scope(Scope("inner"))
        assert ctx.args() == ["shell", "a"]

    def test_args_shadowed(self):
        ctx = Context()
        ctx.push_scope(Scope("f", args=["f", "x"]))
        assert ctx.args() == ["f", "x"]

    def test_last_exit_inherited(self):
        ctx = Context()
        ctx.register_exit(3)
        ctx.push_scope(Scope("inner"))
        assert ctx.last_exit == 3
        ctx.register_exit(5)
        assert ctx.last_exit == 5
        ctx.pop_scope()
        assert ctx.last_exit == 3


class TestTemporaryFiles:
    """Test temporary file ownership."""

    def test_pop_deletes_registered_files(self, tmp_path):
        path = tmp_path / "temp"
        path.write_text("x")
        ctx = Context()
        ctx.push_scope(Scope("inner"))
        ctx.register_temporary_file(str(path))
        ctx.pop_scope()
        assert not path.exists()

    def test_pop_without_files_leaves_filesystem(self, tmp_path):
        path = tmp_path / "keep"
        path.write_text("x")
        ctx = Context()
        ctx.push_scope(Scope("inner"))
        ctx.pop_scope()
        assert path.exists()

    def test_missing_file_is_ignored(self, tmp_path):
        ctx = Context()
        ctx.push_scope(Scope("inner"))
        ctx.register_temporary_file(str(tmp_path / "gone"))
        ctx.pop_scope()

    def test_clone_does_not_take_ownership(self, tmp_path):
        path = tmp_path / "temp"
        path.write_text("x")
        ctx = Context()
        ctx.register_temporary_file(str(path))
        with ctx.clone():
            pass
        assert path.exists()
        ctx.close()
        assert not path.exists()


class TestClone:
    """Test context cloning for subshells."""

    def test_variables_are_independent(self):
        ctx = Context()
        ctx.set_var("X", "1")
        with ctx.clone() as inner:
            inner.set_var("X", "2")
            inner.set_var("Y", "3")
        assert ctx.get_var("X") == "1"
        assert ctx.get_var("Y") is None

    def test_aliases_are_independent(self):
        ctx = Context(aliases=Registry({"ll": "ls -l"}))
        with ctx.clone() as inner:
            inner.aliases.insert("la", "ls -a")
            assert inner.aliases.get("ll") == "ls -l"
        assert "la" not in ctx.aliases

    def test_host_is_shared(self):
        ctx = Context()
        with ctx.clone() as inner:
            assert inner.host is ctx.host

    def test_handles_are_duplicated(self, tmp_path):
        ctx = Context()
        handle = open(tmp_path / "out", "wb")
        ctx.set_file_descriptor(3, FileDescriptor.file_handle(handle))
        with ctx.clone() as inner:
            cloned = inner.get_file_descriptor(3)
            assert cloned.handle is not handle
            assert cloned.handle.fileno() != handle.fileno()
        assert not handle.closed
        ctx.close()
        assert handle.closed


class TestRegistry:
    """Test the shared name tables."""

    def test_insert_get_remove(self):
        registry = Registry()
        registry.insert("a", 1)
        assert registry.get("a") == 1
        assert "a" in registry
        assert registry.remove("a") == 1
        assert registry.get("a") is None

    def test_items_sorted(self):
        registry = Registry({"b": 2, "a": 1})
        assert registry.items() == [("a", 1), ("b", 2)]
        assert registry.names() == ["a", "b"]

    def test_copy_is_independent(self):
        registry = Registry({"a": 1})
        copy = registry.copy()
        copy.insert("b", 2)
        assert "b" not in registry
        assert len(copy) == 2


def test_standard_descriptors_present():
    ctx = Context()
    for fd in (0, 1, 2):
        assert ctx.get_file_descriptor(fd) is not None
    assert ctx.get_file_descriptor(3) is None
    assert os.getpid() == ctx.host.process_id()
