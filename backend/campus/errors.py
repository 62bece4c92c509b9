"""Typed application errors.

Services raise these instead of returning sentinel values; the FastAPI
exception handlers in `campus.main` render each one with its
`status_code` and a `{"detail": ...}` body.
"""

from typing import Dict, Optional


class CampusError(Exception):
    """Base class for all errors that map to an HTTP response."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CampusError):
    """Malformed or missing input; `fields` maps field name to message."""
    status_code = 400

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}


class AuthenticationError(CampusError):
    """Bad credentials or a missing/invalid token."""
    status_code = 401


class AuthorizationError(CampusError):
    """Role or ownership check failed.

    `reason` is for audit logging only (`policy` or `ownership`); clients
    see the same 403 response for both.
    """
    status_code = 403

    def __init__(self, message: str, reason: str = "policy"):
        super().__init__(message)
        self.reason = reason


class NotFoundError(CampusError):
    status_code = 404


class ConflictError(CampusError):
    """A unique field (for example a profile email) is already taken."""
    status_code = 409


class StorageError(CampusError):
    """The entity store failed; the message names the failed operation."""
    status_code = 500
