"""
Exception types raised while resolving connection settings and opening clients.

Resolution problems are raised before any network attempt. Driver failures
are wrapped in ClientFactoryError with the stage that failed, and the
original exception is chained.
"""

from typing import Optional


class ConnectionResolutionError(Exception):
    """Base class for every error raised by connkit."""
    pass


class ConfigurationError(ConnectionResolutionError):
    """Invalid or incomplete connection settings."""
    pass


class ClientFactoryError(ConnectionResolutionError):
    """
    A driver failed while building a client from a resolved descriptor.

    Attributes:
        stage: Which step failed, e.g. "master-open" or "replica-open"
    """

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        stage = getattr(stage, "value", stage)
        self.stage = stage
        self.cause = cause
        text = f"{stage}: {message}"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)
