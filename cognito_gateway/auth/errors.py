"""
Exceptions raised by the Cognito gateway.

Route handlers catch these and turn them into the JSON failure body
(``message`` + ``error``) returned to the caller.
"""
from typing import Optional


class CognitoGatewayError(Exception):
    """Base class for all gateway errors."""


class InvalidArgumentError(CognitoGatewayError, ValueError):
    """Raised for malformed or missing input (empty secret, non-string value, bad body)."""


class UpstreamError(CognitoGatewayError):
    """Raised when a Cognito API call is rejected or fails."""

    def __init__(self, operation: str, error: Exception):
        self.operation = operation
        self.error = error
        super().__init__(f"{operation} failed: {error}")


class RenderingError(CognitoGatewayError):
    """Raised when the QR code renderer fails."""

    def __init__(self, message: str, error: Optional[Exception] = None):
        self.error = error
        super().__init__(message if error is None else f"{message}: {error}")
