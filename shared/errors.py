"""
Shared error handling for the edge gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class GatewayException(Exception):
    """Base exception for gateway components."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(GatewayException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class AccessVerificationError(AuthenticationError):
    """The access token could not be trusted, for whatever reason."""

    def __init__(self, message: str = "Access token verification failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "ACCESS_VERIFICATION_ERROR"


class KeySetFetchError(GatewayException):
    """The signing key set could not be retrieved."""

    def __init__(self, url: str, message: str = "Key set fetch failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_SET_FETCH_ERROR", f"{url}: {message}", details)
        self.url = url


class ConfigurationError(GatewayException):
    """Missing or inconsistent configuration."""

    status_code = 500

    def __init__(self, message: str = "Configuration error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
