import logging

logger = logging.getLogger(__name__)


class JobTable:
    """Background jobs: pid → StageHandle"""

    def __init__(self):
        self._jobs = {}

    def add(self, handle):
        """Thêm job vào danh sách background"""
        self._jobs[handle.pid] = handle
        print(f"[{handle.pid}] started in background: {handle.stage.text}", flush=True)

    def reap(self):
        """
        Dọn zombie của các job nền đã kết thúc, không chờ job đang chạy.
        Returns: list of finished handles
        """
        finished = []
        for pid, handle in list(self._jobs.items()):
            if handle.poll() is None:
                continue
            del self._jobs[pid]
            finished.append(handle)
            logger.debug("reaped background pid %d (status %s)", pid, handle.returncode)
            print(f"[{pid}] finished: {handle.stage.text}", flush=True)
        return finished

    def get(self, pid):
        return self._jobs.get(pid)

    def pids(self):
        return list(self._jobs)

    def __len__(self):
        return len(self._jobs)

    def __contains__(self, pid):
        return pid in self._jobs
