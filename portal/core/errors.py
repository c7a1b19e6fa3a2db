# portal/core/errors.py
"""Error taxonomy shared by the services and the HTTP layer.

Each error carries the status code it maps to, so one exception handler in
``portal.main`` can render all of them as ``{"error": ..., "details": ...}``.
"""
from typing import Optional


class PortalError(Exception):
    """Base exception for all portal errors."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(PortalError):
    """Required request fields are missing or malformed (client's fault)."""

    status_code = 400
    message = "Invalid request"


class AuthError(PortalError):
    """Bad credentials or session token.

    Deliberately the same for unknown names and wrong passwords.
    """

    status_code = 401
    message = "Invalid credentials"


class NotFoundError(PortalError):
    status_code = 404
    message = "Student not found"


class UpstreamError(PortalError):
    """Airtable was unreachable or answered with a non-success status."""

    status_code = 502
    message = "Failed to fetch from Airtable"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None,
        timeout: bool = False,
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status
        if timeout:
            self.status_code = 504


class ConfigError(PortalError):
    """A required secret or credential is missing. Raised before serving traffic."""

    message = "Invalid configuration"
