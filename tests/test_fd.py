"""Tests for file descriptors."""

import os

import pytest

from nutshell.interpreter import FDTable, FileDescriptor
from nutshell.interpreter.errors import (
    FileNotReadableError,
    UnusableForInputError,
    UnusableForOutputError,
)
from nutshell.interpreter.fd import FDKind


class TestLazyFiles:
    """File and AppendFile descriptors open on first use."""

    def test_file_is_lazy(self, tmp_path):
        descriptor = FileDescriptor.file(str(tmp_path / "out"))
        assert descriptor.is_lazy
        assert not (tmp_path / "out").exists()

    def test_materializes_once(self, tmp_path):
        descriptor = FileDescriptor.file(str(tmp_path / "out"))
        first = descriptor.output()
        second = descriptor.output()
        assert descriptor.kind == FDKind.HANDLE
        assert first is second
        descriptor.close()

    def test_write_truncates(self, tmp_path):
        path = tmp_path / "out"
        path.write_text("old contents\n")
        descriptor = FileDescriptor.file(str(path))
        with descriptor.writer_stream() as stream:
            stream.write("new\n")
        descriptor.close()
        assert path.read_text() == "new\n"

    def test_append_keeps_contents(self, tmp_path):
        path = tmp_path / "out"
        path.write_text("first\n")
        descriptor = FileDescriptor.append_file(str(path))
        with descriptor.writer_stream() as stream:
            stream.write("second\n")
        descriptor.close()
        assert path.read_text() == "first\nsecond\n"

    def test_read_file(self, tmp_path):
        path = tmp_path / "in"
        path.write_text("hello\n")
        descriptor = FileDescriptor.file(str(path))
        with descriptor.reader_stream() as stream:
            assert stream.read() == "hello\n"
        descriptor.close()

    def test_missing_file_not_readable(self, tmp_path):
        descriptor = FileDescriptor.file(str(tmp_path / "missing"))
        with pytest.raises(FileNotReadableError):
            descriptor.input()

    def test_streams_share_one_handle(self, tmp_path):
        path = tmp_path / "out"
        descriptor = FileDescriptor.file(str(path))
        with descriptor.writer_stream() as stream:
            stream.write("a\n")
        with descriptor.writer_stream() as stream:
            stream.write("b\n")
        descriptor.close()
        assert path.read_text() == "a\nb\n"


class TestStandardDescriptors:
    """Test the process's own descriptors."""

    def test_stdout_not_usable_for_input(self):
        with pytest.raises(UnusableForInputError):
            FileDescriptor.stdout().input()

    def test_stdin_not_usable_for_output(self):
        with pytest.raises(UnusableForOutputError):
            FileDescriptor.stdin().output()

    def test_raw_numbers(self):
        assert FileDescriptor.stdin().input() == 0
        assert FileDescriptor.stdout().output() == 1
        assert FileDescriptor.stderr().output() == 2


class TestPipes:
    """Test pipe descriptors."""

    def test_pipe_ends(self):
        reader, writer = os.pipe()
        try:
            descriptor = FileDescriptor.pipe(reader, writer)
            assert descriptor.input() == reader
            assert descriptor.output() == writer
            with descriptor.writer_stream() as stream:
                stream.write("through the pipe\n")
            os.close(writer)
            writer = None
            with descriptor.reader_stream() as stream:
                assert stream.read() == "through the pipe\n"
        finally:
            os.close(reader)
            if writer is not None:
                os.close(writer)

    def test_close_does_not_close_pipe(self):
        reader, writer = os.pipe()
        FileDescriptor.pipe(reader, writer).close()
        os.write(writer, b"x")
        assert os.read(reader, 1) == b"x"
        os.close(reader)
        os.close(writer)

    def test_single_ended_pipe(self):
        reader, writer = os.pipe()
        try:
            with pytest.raises(UnusableForOutputError):
                FileDescriptor.pipe(reader=reader).output()
            with pytest.raises(UnusableForInputError):
                FileDescriptor.pipe(writer=writer).input()
        finally:
            os.close(reader)
            os.close(writer)

    def test_clone_outlives_original_ends(self):
        reader, writer = os.pipe()
        clone = FileDescriptor.pipe(writer=writer).clone()
        os.close(writer)
        try:
            assert clone.owned
            assert clone.reader is None
            with clone.writer_stream() as stream:
                stream.write("after close\n")
        finally:
            clone.close()
        with os.fdopen(reader) as stream:
            assert stream.read() == "after close\n"

    def test_closing_clone_releases_its_end(self):
        reader, writer = os.pipe()
        clone = FileDescriptor.pipe(writer=writer).clone()
        os.close(writer)
        clone.close()
        assert clone.writer is None
        # Every writer is gone, so the reader sees end of file
        assert os.read(reader, 1) == b""
        os.close(reader)


class TestFDTable:
    """Test descriptor tables."""

    def test_standard_table(self):
        table = FDTable.standard()
        assert sorted(table) == [0, 1, 2]

    def test_replacing_entry_closes_previous(self, tmp_path):
        table = FDTable()
        handle = open(tmp_path / "out", "wb")
        table.set(3, FileDescriptor.file_handle(handle))
        table.set(3, FileDescriptor.stdout())
        assert handle.closed

    def test_clone_duplicates_handles(self, tmp_path):
        table = FDTable()
        handle = open(tmp_path / "out", "wb")
        table.set(3, FileDescriptor.file_handle(handle))
        clone = table.clone()
        clone.close()
        assert not handle.closed
        table.close()
        assert handle.closed
