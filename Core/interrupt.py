import logging
import signal
import sys

from config import INTERRUPT_EXIT_STATUS
from Core.errors import InterruptRequested
from Core.history import show_history

logger = logging.getLogger(__name__)


class InterruptHandler:
    """
    Ctrl+C = in history rồi thoát shell.

    The signal handler only records the request and raises
    InterruptRequested to break out of a blocking read or wait. The dump
    and the exit happen in shutdown(), called from the main loop.
    """

    def __init__(self, signum=signal.SIGINT):
        self.signum = signum
        self.pending = False
        self._previous = None

    def install(self):
        self._previous = signal.signal(self.signum, self._handle)

    def uninstall(self):
        if self._previous is not None:
            signal.signal(self.signum, self._previous)
            self._previous = None

    def _handle(self, signum, frame):
        self.pending = True
        raise InterruptRequested()

    def check(self):
        """True if an interrupt arrived and shutdown() is due."""
        return self.pending

    def shutdown(self, history, jobs=None):
        """Print the whole history once, then end the process. Never returns."""
        # một Ctrl+C nữa trong lúc in không được cắt ngang
        signal.signal(self.signum, signal.SIG_IGN)
        logger.debug("interrupt received, dumping %d history entries", len(history))
        print()
        show_history(history, jobs)
        sys.exit(INTERRUPT_EXIT_STATUS)
