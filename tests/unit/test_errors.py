from tripsync.errors import (
    USER_MESSAGES,
    AuthenticationError,
    ErrorCode,
    MigrationError,
    NotFoundOrForbiddenError,
    NotSignedInError,
    PartialReplaceFailure,
    RemoteFailureError,
    StorageError,
    TripSyncError,
    ValidationError,
)


def test_all_error_codes_have_user_message():
    for code in ErrorCode:
        assert code in USER_MESSAGES


def test_user_message_lookup():
    err = TripSyncError("sqlite disk I/O error", code=ErrorCode.STORAGE_FAILED)
    assert err.user_message == "Unable to save your changes on this device. Please try again."


def test_subclasses_use_default_codes():
    assert ValidationError("bad").code is ErrorCode.VALIDATION_ERROR
    assert StorageError("io").code is ErrorCode.STORAGE_FAILED
    assert AuthenticationError("bad token").code is ErrorCode.AUTH_FAILED
    assert NotSignedInError().code is ErrorCode.NOT_SIGNED_IN
    assert RemoteFailureError("down").code is ErrorCode.REMOTE_FAILED
    assert NotFoundOrForbiddenError("nope").code is ErrorCode.NOT_FOUND_OR_FORBIDDEN
    assert MigrationError("failed").code is ErrorCode.MIGRATION_FAILED


def test_explicit_code_overrides_default():
    err = StorageError("cannot open", code=ErrorCode.STORAGE_OPEN_FAILED)
    assert err.user_message == USER_MESSAGES[ErrorCode.STORAGE_OPEN_FAILED]


def test_not_signed_in_default_message():
    assert str(NotSignedInError()) == "Not signed in"


def test_partial_replace_carries_progress():
    err = PartialReplaceFailure("stopped", committed_chunks=1, total_chunks=3)
    assert isinstance(err, RemoteFailureError)
    assert err.code is ErrorCode.PARTIAL_REPLACE
    assert (err.committed_chunks, err.total_chunks) == (1, 3)
    assert err.retryable


def test_validation_errors_are_not_retryable():
    assert not ValidationError("bad").retryable
    assert not NotFoundOrForbiddenError("nope").retryable
    assert RemoteFailureError("down").retryable


def test_user_message_never_exposes_internal_message():
    internal = "DELETE FROM trips WHERE user_id = 'user_secret'"
    err = RemoteFailureError(internal)
    assert internal not in err.user_message
