"""
Exit Codes - Process exit status for schedulers and alerting.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes returned by the CLI."""

    SUCCESS = 0  # cycle succeeded, or nothing relevant changed
    SYNC_FAILED = 1  # reconciliation failed or an item did not converge
    CONFIG_ERROR = 2  # unusable configuration; nothing was attempted
    INTERRUPTED = 130
