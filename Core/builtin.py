from Core.history import show_history

EXIT = "exit"
HISTORY = "history"


def builtin_history(history, jobs=None):
    """Show command history"""
    show_history(history, jobs)
    return 0


def execute_builtin(line, history, jobs=None):
    """
    Execute built-in command if the whole line matches one.
    Returns (executed: bool, exit_requested: bool)
    """
    if line == EXIT:
        return True, True
    if line == HISTORY:
        builtin_history(history, jobs)
        return True, False
    return False, False
