# command_center/errors.py
from enum import Enum


class ErrorType(str, Enum):
    '''
    Structured classification of what went wrong in a user action.

    VALIDATION_ERROR: bad input caught before any network call (file size/type, empty text).
    BACKEND_ERROR: the record store rejected a read or write.
    BLOB_STORE_ERROR: the attachment store rejected an upload or delete.
    AUTH_ERROR: wrong credentials or a disallowed domain.
    NOT_FOUND: the project / item / attachment id does not exist.
    '''
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"
    BLOB_STORE_ERROR = "BLOB_STORE_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    NOT_FOUND = "NOT_FOUND"


class BackendError(RuntimeError):
    """A record-store call failed; the transaction has been rolled back."""


class AuthenticationError(ValueError):
    """Credentials or identity claims were rejected."""


class NotFoundError(ValueError):
    """Unknown project / punch item / attachment id."""
