"""Standard exit codes for pg-shell.

Only the process-level entry point uses these; db-* commands report
failures as text.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the pg-shell process."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    NETWORK_ERROR = 5
    CONFIG_ERROR = 7
