import errno
import logging
import os
import signal
import subprocess
import sys
import time

from config import EXEC_FAILURE_STATUS, SHELL_NAME
from Core.errors import ExecFailure, ResourceExhaustion

logger = logging.getLogger(__name__)

# errno của các lỗi exec: chỉ ảnh hưởng tới stage đó, không phải cả shell
EXEC_ERRNOS = {
    errno.ENOENT,
    errno.EACCES,
    errno.EPERM,
    errno.ENOEXEC,
    errno.ENOTDIR,
    errno.EISDIR,
    errno.ELOOP,
    errno.ENAMETOOLONG,
}


class Conduit:
    """
    A pipe between two stages. Closing either end is idempotent,
    so the executor can always close everything on the way out.
    """

    def __init__(self):
        try:
            self.read_fd, self.write_fd = os.pipe()
        except OSError as e:
            raise ResourceExhaustion(f"pipe creation failed: {e.strerror}") from e
        logger.debug("pipe opened r=%d w=%d", self.read_fd, self.write_fd)

    def close_write(self):
        self.write_fd = _close(self.write_fd)

    def close_read(self):
        self.read_fd = _close(self.read_fd)

    def close(self):
        self.close_write()
        self.close_read()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _close(fd):
    if fd is not None:
        try:
            os.close(fd)
        except OSError as e:
            logger.warning("failed to close fd %d: %s", fd, e.strerror)
    return None


def _ignore_hangup():
    # chạy trong tiến trình con, trước exec
    signal.signal(signal.SIGHUP, signal.SIG_IGN)


class StageHandle:
    """Running (or failed-to-start) child process of one stage."""

    def __init__(self, stage, proc=None, start_time=None, error=None):
        self.stage = stage
        self.proc = proc
        self.error = error
        self.start_time = int(time.time()) if start_time is None else start_time
        self.end_time = None
        self.returncode = EXEC_FAILURE_STATUS if proc is None else None

    @property
    def pid(self):
        return self.proc.pid if self.proc is not None else None

    @property
    def background(self):
        return self.stage.background

    def wait(self):
        """Block until the child terminates. Returns its returncode."""
        if self.proc is not None and self.returncode is None:
            self.returncode = self.proc.wait()
            logger.debug("pid %d exited with %d", self.proc.pid, self.returncode)
        if self.end_time is None:
            self.end_time = int(time.time())
        return self.returncode

    def poll(self):
        """Non-blocking check. Returns the returncode or None if running."""
        if self.proc is not None and self.returncode is None:
            self.returncode = self.proc.poll()
        return self.returncode

    def status(self):
        return self.returncode

    def succeeded(self):
        # Popen reports death by signal as a negative returncode
        return self.returncode == 0


class ProcessLauncher:
    """Starts one child process per pipeline stage."""

    def launch(self, stage, stdin=None, stdout=None):
        """
        Chạy stage với stdin/stdout đã cho (None = dùng của shell).
        Background stages write to the null device and ignore SIGHUP.
        """
        if not stage.argv:
            return self._failed(stage, int(time.time()), ExecFailure(stage.text, "no command to run"))

        kwargs = {"stdin": stdin, "stdout": stdout}
        if stage.background:
            kwargs.update(
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                preexec_fn=_ignore_hangup,
            )

        # output của shell phải ra trước output của tiến trình con
        sys.stdout.flush()
        start_time = int(time.time())
        try:
            proc = subprocess.Popen(list(stage.argv), **kwargs)
        except subprocess.SubprocessError as e:
            return self._failed(stage, start_time, ExecFailure(stage.program, str(e)))
        except OSError as e:
            if e.errno in EXEC_ERRNOS:
                return self._failed(stage, start_time, ExecFailure(stage.program, _describe(e)))
            raise ResourceExhaustion(f"could not start '{stage.program}': {e.strerror}") from e

        logger.debug("launched pid %d: %s", proc.pid, stage.argv)
        return StageHandle(stage, proc=proc, start_time=start_time)

    def _failed(self, stage, start_time, error):
        print(f"{SHELL_NAME}: {error}", file=sys.stderr, flush=True)
        handle = StageHandle(stage, start_time=start_time, error=error)
        handle.end_time = start_time
        return handle


def _describe(e):
    if e.errno == errno.ENOENT:
        return "command not found"
    if e.errno in (errno.EACCES, errno.EPERM):
        return "permission denied"
    return e.strerror or "exec failed"
