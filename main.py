import logging
import sys

from config import LOG_LEVEL
from Core.prompt import init_readline
from Core.shell import Shell


def main():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    init_readline()
    sys.exit(Shell().run())


if __name__ == "__main__":
    main()
