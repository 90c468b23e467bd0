import getpass
import os
import socket
import sys

import readline

# \001 \002 báo cho readline biết đoạn nào không chiếm chỗ trên màn hình
GREEN = "\001\033[32m\002"
RED = "\001\033[31m\002"
BLUE = "\001\033[34m\002"
BOLD = "\001\033[1m\002"
RESET = "\001\033[0m\002"


def _user():
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "user"


def get_prompt(color=None):
    """user@host:cwd, then '$ ' on the next line"""
    if color is None:
        color = sys.stdout.isatty()

    user = _user()
    host = socket.gethostname()
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = "?"

    if not color:
        return f"{user}@{host}:{cwd}\n$ "
    return f"{GREEN}{user}{RESET}{RED}@{host}{RESET}:{BLUE}{cwd}{RESET}\n{BOLD}${RESET} "


def init_readline():
    """Cấu hình readline để hoạt động giống terminal Linux"""
    if not sys.stdin.isatty():
        return

    # Phím mũi tên lên/xuống
    readline.parse_and_bind("\\e[A: previous-history")
    readline.parse_and_bind("\\e[B: next-history")

    # Ctrl+Left/Right để nhảy giữa các từ
    readline.parse_and_bind("\\e[1;5D: backward-word")
    readline.parse_and_bind("\\e[1;5C: forward-word")

    readline.parse_and_bind("set editing-mode emacs")
