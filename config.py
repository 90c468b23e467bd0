import os

SHELL_NAME = "pipeshell"

# Số lệnh tối đa giữ trong history
MAX_HISTORY = 100

PIPE_DELIMITER = "|"
BACKGROUND_MARKER = "&"
ARGV_DELIMITERS = " \t\n"

EXEC_FAILURE_STATUS = 127
INTERRUPT_EXIT_STATUS = 1
FATAL_EXIT_STATUS = 1

LOG_LEVEL = os.environ.get("PIPESHELL_LOG_LEVEL", "WARNING")
