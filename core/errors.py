"""
core/errors.py -- Domain error taxonomy for Beacon.

Stores and guards raise these; api/main.py owns the single exception handler
that turns them into the JSON error envelope. Each class carries its HTTP
status, a machine-readable code, and a message that is safe to show a client.

`internal` marks errors that are unexpected conditions rather than client
mistakes. The boundary handler logs those with a traceback and hides their
detail from the response.

Layer rule: core/ is the kernel. No imports from api/, auth/, or locations/.
"""

from __future__ import annotations


class BeaconError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."
    internal: bool = True

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)


class ValidationError(BeaconError):
    """A required field is missing or malformed."""

    status_code = 400
    code = "validation_error"
    message = "Request validation failed."
    internal = False


class DuplicateIdentity(BeaconError):
    """The email address is already registered."""

    status_code = 409
    code = "conflict"
    message = "A user with that email already exists."
    internal = False


class NotFound(BeaconError):
    status_code = 404
    code = "not_found"
    message = "Resource not found."
    internal = False


class InvalidCredentials(BeaconError):
    """The user exists but the password does not match the stored hash."""

    status_code = 401
    code = "bad_credentials"
    message = "Invalid email or password."
    internal = False


class Unauthorized(BeaconError):
    """Missing, unknown, or non-owned token."""

    status_code = 401
    code = "unauthorized"
    message = "Authentication required."
    internal = False


class WriteFailure(BeaconError):
    """A storage mutation affected zero rows where one was expected."""


class StoreUnavailable(BeaconError):
    """The persistence layer could not be reached."""
