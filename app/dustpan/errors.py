"""Exception types raised by dustpan.

Per-entry faults never surface as exceptions: the scan engine counts them
and the deletion executor records them as failed results. Only faults that
prevent a session from starting are raised.
"""


class DustpanError(Exception):
    """Base exception for dustpan errors."""


class ScanRootError(DustpanError):
    """Raised when the scan root is missing, not a directory, or unreadable."""
