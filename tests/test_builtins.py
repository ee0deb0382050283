"""Tests for builtin commands."""

import pytest

from nutshell.ast import FunctionDef, Quoted, Variable

from .helpers import cmd, program, to_file


def run(shell, *args, out="out.txt", err="err.txt"):
    """Run one command with stdout and stderr redirected to files."""
    result = shell.run(program(cmd(*args, redirects=[to_file(out), to_file(err, fd=2)])))
    return result.exit_code


class TestEcho:
    """Test the echo builtin."""

    def test_echo(self, shell, tmp_path):
        assert run(shell, "echo", "hello", "world") == 0
        assert (tmp_path / "out.txt").read_text() == "hello world\n"

    def test_echo_no_newline(self, shell, tmp_path):
        run(shell, "echo", "-n", "hello")
        assert (tmp_path / "out.txt").read_text() == "hello"

    def test_echo_invalid_flag(self, shell, tmp_path):
        assert run(shell, "echo", "-x") == 2
        assert "invalid option" in (tmp_path / "err.txt").read_text()


class TestTrueFalse:
    def test_exit_codes(self, shell):
        assert run(shell, "true") == 0
        assert run(shell, "false") == 1


class TestCd:
    """Test the cd builtin."""

    def test_cd_directory(self, shell, tmp_path):
        (tmp_path / "sub").mkdir()
        assert run(shell, "cd", "sub") == 0
        assert shell.cwd == str(tmp_path / "sub")
        assert shell.context.get_var("OLDPWD") == str(tmp_path)

    def test_cd_home(self, shell, tmp_path):
        (tmp_path / "home").mkdir()
        shell.context.set_var("HOME", str(tmp_path / "home"))
        run(shell, "cd")
        assert shell.cwd == str(tmp_path / "home")

    def test_cd_dash_prints_directory(self, shell, tmp_path):
        (tmp_path / "sub").mkdir()
        run(shell, "cd", "sub")
        run(shell, "cd", "-", out="../back.txt", err="../err.txt")
        assert shell.cwd == str(tmp_path)
        assert (tmp_path / "back.txt").read_text() == f"{tmp_path}\n"

    def test_cd_dash_without_oldpwd(self, shell, tmp_path):
        assert run(shell, "cd", "-") == 1
        assert (tmp_path / "err.txt").read_text() == "cd: No directory to change to.\n"

    def test_cd_not_a_directory(self, shell, tmp_path):
        (tmp_path / "file").write_text("")
        assert run(shell, "cd", "file") == 1
        assert (tmp_path / "err.txt").read_text() == "cd: Path is not a directory.\n"
        assert shell.cwd == str(tmp_path)

    def test_cd_too_many_arguments(self, shell):
        assert run(shell, "cd", "a", "b") == 2


class TestPwd:
    def test_pwd(self, shell, tmp_path):
        run(shell, "pwd")
        assert (tmp_path / "out.txt").read_text() == f"{tmp_path}\n"


class TestExportUnset:
    """Test export and unset."""

    def test_export_assignment(self, shell):
        assert run(shell, "export", "FOO=bar") == 0
        assert shell.context.get_var("FOO") == "bar"
        assert shell.context.exported_vars()["FOO"] == "bar"

    def test_export_unknown(self, shell, tmp_path):
        assert run(shell, "export", "NOPE") == 1
        assert (tmp_path / "err.txt").read_text() == "export: unknown variable: NOPE\n"

    def test_export_list(self, shell, tmp_path):
        shell.context.set_var("L", ["a"])
        assert run(shell, "export", "L") == 1
        assert "cannot export list variable: L" in (tmp_path / "err.txt").read_text()

    def test_unset_variable(self, shell):
        shell.context.set_var("X", "1")
        assert run(shell, "unset", "X") == 0
        assert shell.context.get_var("X") is None

    def test_unset_function(self, shell):
        shell.context.register_function(FunctionDef(name="f"))
        assert run(shell, "unset", "-f", "f") == 0
        assert shell.context.get_function("f") is None

    def test_unset_both_flags(self, shell):
        assert run(shell, "unset", "-f", "-v", "x") == 2


class TestAlias:
    """Test alias and unalias."""

    def test_define_and_use(self, shell, tmp_path):
        run(shell, "alias", "greet", "echo hello")
        run(shell, "greet", "there")
        assert (tmp_path / "out.txt").read_text() == "hello there\n"

    def test_list_aliases(self, shell, tmp_path):
        shell.context.aliases.insert("b", "two")
        shell.context.aliases.insert("a", "one")
        run(shell, "alias")
        assert (tmp_path / "out.txt").read_text() == 'alias a "one"\nalias b "two"\n'

    def test_show_missing_alias(self, shell, tmp_path):
        assert run(shell, "alias", "nope") == 1
        assert (tmp_path / "err.txt").read_text() == "alias: nope: not found\n"

    def test_unalias(self, shell):
        shell.context.aliases.insert("a", "one")
        run(shell, "unalias", "a")
        assert "a" not in shell.context.aliases


class TestSleep:
    """Test the sleep builtin."""

    def test_sleep_zero(self, shell):
        assert run(shell, "sleep", "0") == 0
        assert run(shell, "sleep", "0", "minutes") == 0

    @pytest.mark.parametrize("args", [[], ["x"], ["-1"], ["1", "days"], ["1", "2", "3"]])
    def test_sleep_usage(self, shell, args):
        assert run(shell, "sleep", *args) == 2


class TestExit:
    """Test the exit builtin."""

    def test_exit_code(self, shell):
        result = shell.run(program(cmd("exit", "5"), cmd("echo", "unreachable")))
        assert result.exit_code == 5
        assert result.exited

    def test_exit_uses_last_exit(self, shell):
        result = shell.run(program(cmd("false"), cmd("exit")))
        assert result.exit_code == 1

    def test_exit_non_numeric(self, shell):
        assert run(shell, "exit", "abc") == 2


class TestInterpolate:
    """Test the interpolate builtin."""

    def test_interpolate(self, shell, tmp_path):
        shell.context.set_var("X", "1")
        run(shell, "interpolate", Quoted("x=$X"), Quoted("pid=${X}"))
        assert (tmp_path / "out.txt").read_text() == "x=1\npid=1\n"

    def test_interpolate_error(self, shell, tmp_path):
        assert run(shell, "interpolate", Quoted("$MISSING")) == 1
        assert (tmp_path / "err.txt").read_text() == "interpolate: undefined variable: MISSING\n"


class TestTypeWhich:
    """Test command resolution builtins."""

    def test_type_builtin(self, shell, tmp_path):
        run(shell, "type", "echo")
        assert (tmp_path / "out.txt").read_text() == "echo is a shell built-in\n"

    def test_type_alias(self, shell, tmp_path):
        shell.context.aliases.insert("ll", "ls -l")
        run(shell, "type", "ll")
        assert (tmp_path / "out.txt").read_text() == "ll is aliased to 'ls -l'\n"

    def test_type_function(self, shell, tmp_path):
        shell.context.register_function(FunctionDef(name="f"))
        run(shell, "type", "f")
        assert (tmp_path / "out.txt").read_text() == "f is a function\n"

    def test_type_program(self, shell, tmp_path):
        run(shell, "type", "sh")
        assert (tmp_path / "out.txt").read_text().startswith("sh is '/")

    def test_type_several_names(self, shell, tmp_path):
        assert run(shell, "type", "echo", "no-such-command") == 1
        assert (tmp_path / "out.txt").read_text() == "echo is a shell built-in\n"
        assert (tmp_path / "err.txt").read_text() == "type: no-such-command: not found\n"

    def test_which(self, shell, tmp_path):
        assert run(shell, "which", "sh") == 0
        assert (tmp_path / "out.txt").read_text().strip().endswith("/sh")

    def test_which_missing(self, shell, tmp_path):
        assert run(shell, "which", "no-such-command") == 1
        assert (tmp_path / "err.txt").read_text() == "which: no 'no-such-command' in path.\n"

    def test_which_variable_argument(self, shell, tmp_path):
        shell.context.set_var("NAME", "sh")
        assert run(shell, "which", Variable("NAME")) == 0
