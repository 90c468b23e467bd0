"""Tests for the read-eval loop, built-ins and the interrupt path."""

from __future__ import annotations

import os
import signal
import threading
import time
from unittest.mock import MagicMock

import psutil
import pytest

from Core.builtin import execute_builtin
from Core.errors import InterruptRequested, ResourceExhaustion
from Core.interrupt import InterruptHandler
from Core.prompt import get_prompt
from Core.shell import Shell


def scripted(*lines):
    """read_line replacement returning the given lines, then EOF."""
    feed = iter(lines)
    calls = []

    def _read(prompt):
        calls.append(prompt)
        item = next(feed, EOFError)
        if isinstance(item, type) and issubclass(item, BaseException):
            raise item()
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item()
        return item

    _read.calls = calls
    return _read


@pytest.fixture
def make_shell(history, executor):
    def _make(*lines, **kwargs):
        kwargs.setdefault("executor", executor)
        return Shell(history=history, read_line=scripted(*lines), prompt=lambda: "$ ", **kwargs)

    return _make


class TestBuiltins:
    def test_exit(self, history):
        assert execute_builtin("exit", history) == (True, True)

    def test_history(self, history, capsys):
        assert execute_builtin("history", history) == (True, False)
        assert "Command History" in capsys.readouterr().out

    def test_full_line_case_sensitive(self, history):
        assert execute_builtin("Exit", history) == (False, False)
        assert execute_builtin("exit now", history) == (False, False)
        assert execute_builtin("history | cat", history) == (False, False)


class TestLoop:
    def test_exit_stops_prompting(self, make_shell):
        shell = make_shell("exit", "true")
        assert shell.run() == 0
        assert len(shell.read_line.calls) == 1

    def test_end_of_input(self, make_shell):
        shell = make_shell()
        assert shell.run() == 0

    def test_history_lists_successful_commands(self, make_shell, capsys):
        shell = make_shell("true", "false", "history", "exit")
        assert shell.run() == 0
        out = capsys.readouterr().out
        assert out.count("Command: true\n") == 1
        assert "Command: false" not in out

    def test_history_is_torn_down_on_exit(self, make_shell, history):
        make_shell("true", "exit").run()
        assert len(history) == 0

    def test_read_error_continues(self, make_shell, capsys):
        shell = make_shell(OSError("I/O error"), "history", "exit")
        assert shell.run() == 0
        captured = capsys.readouterr()
        assert "error reading input" in captured.err
        assert "Command History" in captured.out

    def test_parse_error_continues(self, make_shell, capsys):
        shell = make_shell("&", "history", "exit")
        assert shell.run() == 0
        captured = capsys.readouterr()
        assert "syntax error" in captured.err
        assert "Command History" in captured.out

    def test_empty_stage_does_not_drop_line(self, make_shell, capfd):
        shell = make_shell("& | echo hi", "history", "exit")
        assert shell.run() == 0
        captured = capfd.readouterr()
        assert "hi\n" in captured.out
        assert captured.out.count("Command: echo hi\n") == 1
        assert "syntax error" not in captured.err

    def test_builtin_reaps_finished_jobs(self, make_shell, jobs, capsys):
        shell = make_shell("sleep 0.3 &", lambda: _wait_for_jobs(jobs, "history"), "exit")
        assert shell.run() == 0
        assert len(jobs) == 0
        assert "finished: sleep 0.3 &" in capsys.readouterr().out

    def test_blank_line_ignored(self, make_shell, history):
        executor = MagicMock()
        shell = make_shell("   ", "", "exit", executor=executor)
        assert shell.run() == 0
        executor.execute.assert_not_called()

    def test_resource_exhaustion_aborts(self, make_shell, capsys):
        executor = MagicMock()
        executor.execute.side_effect = ResourceExhaustion("pipe creation failed: Too many open files")
        shell = make_shell("echo a | cat", "exit", executor=executor)
        assert shell.run() == 1
        assert len(shell.read_line.calls) == 1
        assert "pipe creation failed" in capsys.readouterr().err


class TestInterrupt:
    def test_sigint_dumps_history_and_exits(self, make_shell, capsys):
        shell = make_shell("true", "echo hi", lambda: signal.raise_signal(signal.SIGINT), "exit")
        with pytest.raises(SystemExit) as excinfo:
            shell.run()
        assert excinfo.value.code != 0

        out = capsys.readouterr().out
        assert out.count("Command: true\n") == 1
        assert out.count("Command: echo hi\n") == 1
        assert out.index("Command: true") < out.index("Command: echo hi")
        assert len(shell.read_line.calls) == 3

    def test_previous_handler_restored(self, make_shell):
        before = signal.getsignal(signal.SIGINT)
        shell = make_shell(lambda: signal.raise_signal(signal.SIGINT))
        with pytest.raises(SystemExit):
            shell.run()
        assert signal.getsignal(signal.SIGINT) is before

    def test_pending_flag_checked_between_iterations(self, make_shell, capsys):
        interrupts = InterruptHandler()
        shell = make_shell(lambda: _set_pending(interrupts, "true"), "exit", interrupts=interrupts)
        with pytest.raises(SystemExit) as excinfo:
            shell.run()
        assert excinfo.value.code == 1
        assert "Command: true" in capsys.readouterr().out

    def test_sigint_while_waiting_on_foreground_child(self, make_shell, capsys):
        timer = threading.Timer(0.5, os.kill, (os.getpid(), signal.SIGINT))
        shell = make_shell("true", "sleep 3", "exit")
        started = time.monotonic()
        timer.start()
        try:
            with pytest.raises(SystemExit) as excinfo:
                shell.run()
        finally:
            timer.cancel()
            for child in psutil.Process().children():
                child.kill()
                child.wait()

        assert excinfo.value.code == 1
        assert time.monotonic() - started < 2.5
        out = capsys.readouterr().out
        assert out.count("Command: true\n") == 1
        assert "Command: sleep 3" not in out
        assert len(shell.read_line.calls) == 2

    def test_handler_only_raises(self):
        handler = InterruptHandler()
        with pytest.raises(InterruptRequested):
            handler._handle(signal.SIGINT, None)
        assert handler.check()


def _set_pending(interrupts, line):
    interrupts.pending = True
    return line


def _wait_for_jobs(jobs, line):
    for pid in jobs.pids():
        jobs.get(pid).proc.wait()
    return line


class TestPrompt:
    def test_plain_prompt(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        prompt = get_prompt(color=False)
        first, second = prompt.split("\n")
        assert first.endswith(":" + os.getcwd())
        assert "@" in first
        assert second == "$ "

    def test_colour_prompt_marks_escapes(self):
        assert "\001\033[32m\002" in get_prompt(color=True)
