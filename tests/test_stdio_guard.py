"""Tests for broken pipe handling on output streams."""

import logging

import pytest

import stdio_guard


class BrokenStream:
    def write(self, data):
        raise BrokenPipeError(32, "Broken pipe")

    def flush(self):
        raise BrokenPipeError(32, "Broken pipe")


@pytest.fixture(autouse=True)
def reset_guard(monkeypatch):
    monkeypatch.setattr(stdio_guard, "_stream_broken", False)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_is_broken_pipe():
    assert stdio_guard.is_broken_pipe(BrokenPipeError())
    assert stdio_guard.is_broken_pipe(OSError("write EPIPE"))
    assert not stdio_guard.is_broken_pipe(ValueError("boom"))


def test_handler_goes_quiet_after_broken_pipe(capsys):
    handler = stdio_guard.BrokenPipeSafeHandler(BrokenStream())
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
    handler.emit(record)
    assert stdio_guard.stream_broken()
    handler.emit(record)
    assert "Logging error" not in capsys.readouterr().err


def test_handler_reports_other_errors(capsys, monkeypatch):
    monkeypatch.setattr(logging, "raiseExceptions", True)

    class FailingStream:
        def write(self, data):
            raise ValueError("closed")

        def flush(self):
            pass

    handler = stdio_guard.BrokenPipeSafeHandler(FailingStream())
    handler.emit(logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None))
    assert not stdio_guard.stream_broken()
    assert "Logging error" in capsys.readouterr().err


def test_safe_print_swallows_broken_pipe():
    stdio_guard.safe_print("::error::boom", stream=BrokenStream())
    assert stdio_guard.stream_broken()


def test_safe_print_writes(capsys):
    stdio_guard.safe_print("hello")
    assert capsys.readouterr().out == "hello\n"


def test_install_configures_root_logger(restore_root_logging):
    stdio_guard.install(logging.DEBUG)
    assert restore_root_logging.level == logging.DEBUG
    assert any(isinstance(h, stdio_guard.BrokenPipeSafeHandler) for h in restore_root_logging.handlers)
