"""
auth/exceptions.py -- Error taxonomy for the Messagely trust boundary.

Every classified failure carries a stable machine-readable code, a safe
human-readable message, and the HTTP status the API layer maps it to. The
API renders these through the same ErrorResponse envelope it uses for
HTTPException, so clients parse one error shape.

InvalidToken and ExpiredToken are internal to TokenIssuer. The
authentication gate collapses both into Unauthenticated before anything
reaches a client, so callers cannot tell a tampered token from a stale one.

Layer rule: no imports from api/ or messages/.
"""

from __future__ import annotations


class MessagelyError(Exception):
    """Base class for every classified error raised by the core."""

    code: str = "error"
    message: str = "Request failed."
    status_code: int = 400

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicateIdentity(MessagelyError):
    code = "duplicate_identity"
    message = "A user with that username already exists."
    status_code = 409


class NotFound(MessagelyError):
    code = "not_found"
    message = "Resource not found."
    status_code = 404


class InvalidCredentials(MessagelyError):
    """Wrong password and unknown username share this one outcome."""

    code = "invalid_credentials"
    message = "Invalid username or password."
    status_code = 401


class Unauthenticated(MessagelyError):
    code = "unauthenticated"
    message = "Authentication required."
    status_code = 401


class Forbidden(MessagelyError):
    code = "forbidden"
    message = "You are not allowed to access this resource."
    status_code = 403


class InvalidToken(MessagelyError):
    code = "invalid_token"
    message = "Token is invalid."
    status_code = 401


class ExpiredToken(MessagelyError):
    code = "expired_token"
    message = "Token has expired."
    status_code = 401
