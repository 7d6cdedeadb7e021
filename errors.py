"""Exception hierarchy for the course name sync pass."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for every failure raised by the sync pass."""


class ConfigError(SyncError):
    """Host configuration is present but unusable."""


class NotConfigured(SyncError):
    """Sync is not configured; the pass is skipped."""


class SourceConnectionError(SyncError, ConnectionError):
    """External course database is unreachable or rejected the login."""


class QueryError(SyncError):
    """Reading the external course table failed after connecting."""


class LocalStoreError(SyncError):
    """Reading the local LMS course table failed."""


class UpdateError(SyncError):
    """Persisting a local course update failed."""

    def __init__(self, message: str, course_id: int | None = None) -> None:
        super().__init__(message)
        self.course_id = course_id


class EncodingError(SyncError, ValueError):
    """Text could not be converted to or from the external encoding."""
