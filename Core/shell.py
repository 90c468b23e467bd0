import logging
import sys

from config import FATAL_EXIT_STATUS, SHELL_NAME
from Core.builtin import execute_builtin
from Core.errors import InterruptRequested, ParseError, ResourceExhaustion
from Core.executor import PipelineExecutor
from Core.history import HistoryStore
from Core.interrupt import InterruptHandler
from Core.parser import parse_command
from Core.prompt import get_prompt

logger = logging.getLogger(__name__)


class Shell:
    """Read-eval loop: one line, one pipeline."""

    def __init__(self, history=None, executor=None, interrupts=None,
                 read_line=input, prompt=get_prompt):
        self.history = history if history is not None else HistoryStore()
        self.executor = executor or PipelineExecutor(self.history)
        self.jobs = self.executor.jobs
        self.interrupts = interrupts or InterruptHandler()
        self.read_line = read_line
        self.prompt = prompt

    def run(self):
        """
        Main shell loop.
        Returns: exit status (0 on 'exit' or end of input)
        """
        self.interrupts.install()
        try:
            while True:
                try:
                    if self.interrupts.check():
                        raise InterruptRequested()
                    status = self.step()
                except InterruptRequested:
                    self.interrupts.shutdown(self.history, self.jobs)
                except ResourceExhaustion as e:
                    print(f"{SHELL_NAME}: {e}", file=sys.stderr, flush=True)
                    return FATAL_EXIT_STATUS

                if status is not None:
                    return status
        finally:
            self.interrupts.uninstall()
            self.history.teardown()

    def step(self):
        """
        Run one iteration.
        Returns: exit status if the loop should stop, else None
        """
        try:
            line = self.read_line(self.prompt())
        except EOFError:
            print()
            return 0
        except OSError as e:
            print(f"{SHELL_NAME}: error reading input: {e}", file=sys.stderr)
            return None

        line = line.rstrip("\r\n")

        # Built-ins
        executed, exit_requested = execute_builtin(line, self.history, self.jobs)
        if exit_requested:
            return 0
        if executed:
            self.jobs.reap()
            return None

        # External / Pipeline
        try:
            pipeline = parse_command(line)
        except ParseError as e:
            print(f"{SHELL_NAME}: {e}", file=sys.stderr)
            return None

        if pipeline is not None:
            result = self.executor.execute(pipeline)
            logger.debug("pipeline %r finished with %s", line, result.returncode)
        return None
