# csrf_guard/core/exceptions.py
"""
CSRF Guard exceptions - standardized error handling for the CSRF layer.

Every failure of the CSRF check is a ``CSRFError``. They all map to
HTTP 403 and differ only by their human-readable reason, so a client
cannot tell the failure causes apart by status code.
"""

from typing import Optional, Dict, Any


class CSRFBaseException(Exception):
    """Base exception for all CSRF Guard errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class CSRFError(CSRFBaseException):
    """A request failed CSRF protection. Always terminal for the request."""

    status_code: int = 403
    default_reason: str = "CSRF verification failed."

    def __init__(
        self,
        message: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize CSRF error.

        Args:
            message: Reason returned to the client (defaults per subclass)
            method: HTTP method of the rejected request
            path: URL path of the rejected request
            details: Additional context for logs, never sent to the client
        """
        super().__init__(message or self.default_reason, details)
        self.method = method
        self.path = path

        if method:
            self.details['method'] = method
        if path:
            self.details['path'] = path

    @property
    def reason(self) -> str:
        """Client-facing reason string"""
        return self.message


class NoSessionError(CSRFError):
    """No session is attached to the request (session middleware missing or misordered)"""
    default_reason = "No session available for CSRF protection."


class NoTokenError(CSRFError):
    """No candidate token was found by any retrieval channel"""
    default_reason = "No CSRF token provided."


class MalformedTokenError(CSRFError):
    """Token does not have the ``salt-digest`` shape"""
    default_reason = "The provided CSRF token is in the wrong format."


class InvalidTokenError(CSRFError):
    """Token digest does not match the session secret"""
    default_reason = "Invalid CSRF token."


class CSRFConfigurationError(CSRFBaseException):
    """Errors in CSRF configuration and initialization"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error description
            component: Component with configuration issue
            details: Additional configuration context
        """
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


# Convenience functions for creating common errors

def no_session_error(method: str = None, path: str = None) -> NoSessionError:
    """Create a no-session error with request context."""
    return NoSessionError(method=method, path=path)


def no_token_error(method: str = None, path: str = None) -> NoTokenError:
    """Create a no-token error with request context."""
    return NoTokenError(method=method, path=path)


def malformed_token_error(length: int = None) -> MalformedTokenError:
    """Create a malformed-token error. Only the token length is recorded."""
    details = {'token_length': length} if length is not None else None
    return MalformedTokenError(details=details)


def invalid_token_error(method: str = None, path: str = None) -> InvalidTokenError:
    """Create an invalid-token error with request context."""
    return InvalidTokenError(method=method, path=path)


def config_error(message: str, component: str) -> CSRFConfigurationError:
    """Create a configuration error with component context."""
    return CSRFConfigurationError(message, component=component)


# Short alias
ConfigurationError = CSRFConfigurationError
