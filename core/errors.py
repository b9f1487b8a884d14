"""
Exception hierarchy for the tracking layer.

Missing data (no user agent, no cookie, no signed-in user) is never an
error and is represented with ``None`` fields instead.
"""

from typing import Optional


class TrackingError(Exception):
    """Base class for every error raised by the tracking layer."""


class StoreError(TrackingError):
    """A store operation failed.

    The resolver and recorder let this propagate unchanged; the tracker
    turns it into a failed ``TrackingResult``.
    """

    def __init__(self, operation: str, message: str = "", cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = message or (str(cause) if cause else "store operation failed")
        super().__init__(f"{operation}: {detail}")


class ConfigurationError(TrackingError):
    """The tracking layer was set up incorrectly and cannot serve requests."""
