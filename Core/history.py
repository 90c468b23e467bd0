import logging
from collections import deque
from dataclasses import dataclass

import psutil

from config import MAX_HISTORY

logger = logging.getLogger(__name__)

RULE = "-------------------------------"


@dataclass(frozen=True)
class HistoryEntry:
    command: str
    pid: int
    start_time: int
    end_time: int
    background: bool = False

    @property
    def duration(self):
        """Thời gian chạy, tính bằng giây."""
        return int(self.end_time - self.start_time)


class HistoryStore:
    """
    Bounded, insertion-ordered log of executed commands.
    When full, the oldest entry is dropped before a new one is added.
    """

    def __init__(self, capacity=MAX_HISTORY):
        if capacity < 1:
            raise ValueError("history capacity must be at least 1")
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)

    def append(self, entry):
        if len(self._entries) == self.capacity:
            logger.debug("history full, evicting %r", self._entries[0].command)
        self._entries.append(entry)

    def list(self):
        """All entries, oldest first."""
        return list(self._entries)

    def teardown(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))


def process_status(pid, jobs=None):
    """
    Trạng thái hiện tại của tiến trình nền.
    A pid the job table no longer tracks has been reaped and may be reused
    by an unrelated process, so it is reported as terminated.
    """
    if jobs is not None and pid not in jobs:
        return "terminated"
    try:
        if psutil.pid_exists(pid):
            return psutil.Process(pid).status()
        return "terminated"
    except psutil.NoSuchProcess:
        return "terminated"
    except psutil.Error:
        return "unknown"


def format_history(store, jobs=None):
    lines = [RULE, "", " Command History: ", RULE]
    for entry in store.list():
        lines.append(f"Command: {entry.command}")
        lines.append(f"PID: {entry.pid}")
        lines.append(f"Start Time: {entry.start_time}")
        lines.append(f"End Time: {entry.end_time}")
        lines.append(f"Duration: {entry.duration} seconds")
        if entry.background:
            lines.append(f"Status: {process_status(entry.pid, jobs)}")
        lines.append(RULE)
    return "\n".join(lines)


def show_history(store, jobs=None):
    """In ra toàn bộ history"""
    print(format_history(store, jobs), flush=True)
