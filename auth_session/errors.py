"""
Auth session errors.

The transport raises these; SessionAdapter operations catch them and turn
them into failure results.
"""
from typing import Optional


class AuthSessionError(Exception):
    """Base class for auth session failures."""
    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message
        self.details = details


class ServerRejection(AuthSessionError):
    """Backend answered with a non-2xx status."""
    def __init__(
        self,
        message: Optional[str],
        status_code: int,
        details: Optional[str] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message or 'no message'}"


class TransportFailure(AuthSessionError):
    """Request never produced a usable response (network error, malformed JSON)."""
    pass
