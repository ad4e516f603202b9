"""
Custom exceptions and error handling for tripsync.

Defines typed exceptions with error codes so callers can branch on the cause
of a failure (bad input, local storage, remote backend, authentication) and
show a safe, user-facing message.

Usage:
    from tripsync.errors import StorageError, ErrorCode

    raise StorageError("IndexedDB open failed", code=ErrorCode.STORAGE_OPEN_FAILED)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"
    NOT_SIGNED_IN = "NOT_SIGNED_IN"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Local storage errors
    STORAGE_FAILED = "STORAGE_FAILED"
    STORAGE_OPEN_FAILED = "STORAGE_OPEN_FAILED"

    # Remote store errors
    REMOTE_FAILED = "REMOTE_FAILED"
    PARTIAL_REPLACE = "PARTIAL_REPLACE"
    NOT_FOUND_OR_FORBIDDEN = "NOT_FOUND_OR_FORBIDDEN"

    # Migration errors
    MIGRATION_FAILED = "MIGRATION_FAILED"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.INVALID_TOKEN: "Your session has expired. Please sign in again.",
    ErrorCode.NOT_SIGNED_IN: "Please sign in to continue.",
    ErrorCode.VALIDATION_ERROR: "Your trip contains invalid information. Please check and try again.",
    ErrorCode.STORAGE_FAILED: "Unable to save your changes on this device. Please try again.",
    ErrorCode.STORAGE_OPEN_FAILED: "Offline storage is unavailable on this device. Please try again.",
    ErrorCode.REMOTE_FAILED: "Unable to reach your account. Please try again.",
    ErrorCode.PARTIAL_REPLACE: "Some of your changes were not saved. Please try again.",
    ErrorCode.NOT_FOUND_OR_FORBIDDEN: "Trip not found or you do not have permission to change it.",
    ErrorCode.MIGRATION_FAILED: "Your offline trips could not be moved to your account. Retry?",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}

RETRYABLE_CODES = frozenset(
    {
        ErrorCode.STORAGE_FAILED,
        ErrorCode.STORAGE_OPEN_FAILED,
        ErrorCode.REMOTE_FAILED,
        ErrorCode.PARTIAL_REPLACE,
        ErrorCode.MIGRATION_FAILED,
    }
)


class TripSyncError(Exception):
    """Base exception for all tripsync errors."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    @property
    def retryable(self) -> bool:
        """Whether the UI should offer a retry action."""
        return self.code in RETRYABLE_CODES


class ValidationError(TripSyncError):
    """Input rejected before persistence was attempted. Never retried."""

    default_code = ErrorCode.VALIDATION_ERROR


class StorageError(TripSyncError):
    """Local store I/O failure. The underlying error is chained as __cause__."""

    default_code = ErrorCode.STORAGE_FAILED


class AuthenticationError(TripSyncError):
    """Authentication or token verification failed."""

    default_code = ErrorCode.AUTH_FAILED


class NotSignedInError(TripSyncError):
    """A remote operation was attempted without a resolvable owner identity."""

    default_code = ErrorCode.NOT_SIGNED_IN

    def __init__(self, message: str = "Not signed in", code: ErrorCode | None = None):
        super().__init__(message, code)


class RemoteFailureError(TripSyncError):
    """Network or backend error on a remote call."""

    default_code = ErrorCode.REMOTE_FAILED


class NotFoundOrForbiddenError(TripSyncError):
    """The document does not exist or is not owned by the caller."""

    default_code = ErrorCode.NOT_FOUND_OR_FORBIDDEN


class PartialReplaceFailure(RemoteFailureError):
    """A chunked collection replace stopped part way.

    Chunks ``1..committed_chunks`` are applied; the rest are not. Resubmitting
    the full item list is safe.
    """

    default_code = ErrorCode.PARTIAL_REPLACE

    def __init__(self, message: str, committed_chunks: int, total_chunks: int):
        self.committed_chunks = committed_chunks
        self.total_chunks = total_chunks
        super().__init__(message)


class MigrationError(TripSyncError):
    """Local-to-remote migration failed after exhausting its retries."""

    default_code = ErrorCode.MIGRATION_FAILED
