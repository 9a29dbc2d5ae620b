"""Exception hierarchy for btview."""


class BtviewError(Exception):
    """Base exception for all btview errors."""


class CaptureError(BtviewError):
    """Stack capture for a process failed."""

    def __init__(self, message: str, pid: int | None = None):
        self.message = message
        self.pid = pid
        super().__init__(message)


class LayoutInvariantError(BtviewError, AssertionError):
    """Internal layout precondition broken; the row cannot be rendered."""
