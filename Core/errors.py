"""Error types raised by the shell core."""


class ShellError(Exception):
    """Base class for shell errors."""


class ParseError(ShellError):
    """A pipeline stage could not be turned into an argument vector."""


class ExecFailure(ShellError):
    """The target program is missing or cannot be executed."""

    def __init__(self, program, reason):
        super().__init__(f"{program}: {reason}")
        self.program = program
        self.reason = reason


class ResourceExhaustion(ShellError):
    """Pipe or process creation failed. The shell cannot go on."""


class InterruptRequested(BaseException):
    """Raised from the SIGINT handler to unblock the main loop.

    Derives from BaseException so generic ``except Exception`` blocks
    never swallow it.
    """
