import logging
import re
from dataclasses import dataclass

from config import ARGV_DELIMITERS, BACKGROUND_MARKER, PIPE_DELIMITER
from Core.errors import ParseError

logger = logging.getLogger(__name__)

_ARGV_SPLIT = re.compile(f"[{re.escape(ARGV_DELIMITERS)}]+")


@dataclass(frozen=True)
class CommandStage:
    """One program invocation inside a pipeline."""

    text: str
    argv: tuple
    background: bool = False

    @property
    def program(self):
        return self.argv[0] if self.argv else self.text


@dataclass(frozen=True)
class Pipeline:
    line: str
    stages: tuple

    def __len__(self):
        return len(self.stages)


def split_pipeline(line):
    """
    Tách dòng lệnh theo dấu '|'.
    Returns: list of trimmed, non-empty stage texts
    """
    fields = (field.strip() for field in line.split(PIPE_DELIMITER))
    return [field for field in fields if field]


def split_argv(stage_text):
    """Split a stage on whitespace. Quotes are ordinary characters."""
    return [tok for tok in _ARGV_SPLIT.split(stage_text) if tok]


def parse_stage(stage_text):
    """
    Parse one stage into a CommandStage.
    The first '&' cuts the stage text and marks it as background.
    """
    body = stage_text
    background = False

    marker = body.find(BACKGROUND_MARKER)
    if marker != -1:
        body = body[:marker]
        background = True
    body = body.rstrip(ARGV_DELIMITERS)

    # stage rỗng được giữ lại, nó chỉ thất bại lúc chạy
    argv = split_argv(body)
    return CommandStage(text=stage_text.strip(), argv=tuple(argv), background=background)


def parse_command(line):
    """
    Parse command line into a Pipeline.
    Returns: Pipeline, or None if the line holds no stage
    Raises ParseError if no stage names a program.
    """
    texts = split_pipeline(line)
    if not texts:
        return None

    stages = tuple(parse_stage(text) for text in texts)
    if not any(stage.argv for stage in stages):
        raise ParseError(f"syntax error near '{line.strip()}'")

    logger.debug("parsed %d stage(s) from %r", len(stages), line)
    return Pipeline(line=line, stages=stages)
