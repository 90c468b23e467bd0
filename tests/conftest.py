"""Shared test fixtures."""

from __future__ import annotations

import pytest

from Core.executor import PipelineExecutor
from Core.history import HistoryEntry, HistoryStore
from Core.job_control import JobTable
from Core.parser import parse_command


@pytest.fixture
def history():
    return HistoryStore(capacity=100)


@pytest.fixture
def jobs():
    table = JobTable()
    yield table
    # không để lại tiến trình nền sau mỗi test
    for pid in table.pids():
        handle = table.get(pid)
        if handle.poll() is None:
            handle.proc.kill()
            handle.proc.wait()


@pytest.fixture
def executor(history, jobs):
    return PipelineExecutor(history, jobs=jobs)


@pytest.fixture
def run(executor):
    """Parse and execute a line, return the PipelineResult."""

    def _run(line):
        return executor.execute(parse_command(line))

    return _run


@pytest.fixture
def make_entry():
    def _make(command, pid=1000, start=100, end=100, background=False):
        return HistoryEntry(command=command, pid=pid, start_time=start, end_time=end, background=background)

    return _make
