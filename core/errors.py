# core/errors.py
"""
Error taxonomy for the asset synchronization layer.

NotFound is deliberately absent: lookups return None or an empty list.
"""
from typing import Any


class AssetSyncError(Exception):
    """Base class for every error raised by the sync layer."""


class RemoteGatewayError(AssetSyncError):
    """The remote store failed a call (network, permission, bad query)."""

    def __init__(self, message: str, *, table: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.table = table
        self.operation = operation


class RemoteWriteError(RemoteGatewayError):
    """The remote store rejected or failed a write; the cache was left untouched."""

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        operation: str | None = None,
        not_found: bool = False,
    ):
        super().__init__(message, table=table, operation=operation)
        self.not_found = not_found


class ValidationFailedError(AssetSyncError):
    """Input rejected locally before any remote write was attempted."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class PartialMultiStepFailure(AssetSyncError):
    """
    A dependent write failed after an earlier write of the same operation
    was confirmed. Retrying the whole operation would duplicate `completed`.
    """

    def __init__(
        self,
        message: str,
        *,
        completed_step: str,
        failed_step: str,
        completed: Any = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.completed_step = completed_step
        self.failed_step = failed_step
        self.completed = completed
        self.cause = cause


class LocalPersistenceError(AssetSyncError):
    """Key-value storage unavailable, corrupt, or over quota."""
