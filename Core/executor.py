import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import List, Optional

from Core.history import HistoryEntry
from Core.job_control import JobTable
from Core.parser import CommandStage, Pipeline
from Core.process import Conduit, ProcessLauncher

logger = logging.getLogger(__name__)


@dataclass
class StageOutcome:
    stage: CommandStage
    pid: Optional[int]
    returncode: Optional[int]
    recorded: bool = False


@dataclass
class PipelineResult:
    pipeline: Pipeline
    outcomes: List[StageOutcome] = field(default_factory=list)

    @property
    def returncode(self):
        """Status of the last stage (None if it runs in background)."""
        return self.outcomes[-1].returncode if self.outcomes else None


class PipelineExecutor:
    """
    Runs a parsed Pipeline: one child per stage, N-1 pipes between them.
    Successful foreground stages and launched background stages go to history.
    """

    def __init__(self, history, launcher=None, jobs=None):
        self.history = history
        self.launcher = launcher or ProcessLauncher()
        self.jobs = jobs if jobs is not None else JobTable()

    def execute(self, pipeline):
        handles = self._launch_all(pipeline)

        result = PipelineResult(pipeline)
        for handle in handles:
            result.outcomes.append(self._finish(handle))

        self.jobs.reap()
        return result

    def _launch_all(self, pipeline):
        handles = []
        last = len(pipeline.stages) - 1

        with ExitStack() as stack:
            prev = None
            for idx, stage in enumerate(pipeline.stages):
                conduit = stack.enter_context(Conduit()) if idx < last else None

                handle = self.launcher.launch(
                    stage,
                    stdin=prev.read_fd if prev else None,
                    stdout=conduit.write_fd if conduit else None,
                )
                handles.append(handle)

                # chỉ giữ lại đầu đọc cho stage kế tiếp
                if conduit:
                    conduit.close_write()
                if prev:
                    prev.close_read()
                prev = conduit

                if stage.background and handle.proc is not None:
                    self._record(handle, end_time=handle.start_time)
                    self.jobs.add(handle)

        return handles

    def _finish(self, handle):
        if handle.background:
            return StageOutcome(
                stage=handle.stage,
                pid=handle.pid,
                returncode=None,
                recorded=handle.proc is not None,
            )

        returncode = handle.wait()
        recorded = handle.succeeded()
        if recorded:
            self._record(handle, end_time=handle.end_time)
        else:
            logger.debug("not recording %r (status %s)", handle.stage.text, returncode)

        return StageOutcome(
            stage=handle.stage,
            pid=handle.pid,
            returncode=returncode,
            recorded=recorded,
        )

    def _record(self, handle, end_time):
        self.history.append(
            HistoryEntry(
                command=handle.stage.text,
                pid=handle.pid,
                start_time=handle.start_time,
                end_time=end_time,
                background=handle.background,
            )
        )
