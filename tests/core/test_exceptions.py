# tests/core/test_exceptions.py
"""
Tests for the CSRF exception hierarchy.
"""
import pytest

from csrf_guard.core.exceptions import (
    CSRFBaseException,
    CSRFError,
    InvalidTokenError,
    MalformedTokenError,
    NoSessionError,
    NoTokenError,
    config_error,
    invalid_token_error,
    malformed_token_error,
    no_session_error,
    no_token_error,
)


@pytest.mark.parametrize("error_class,reason", [
    (NoSessionError, "No session available for CSRF protection."),
    (NoTokenError, "No CSRF token provided."),
    (MalformedTokenError, "The provided CSRF token is in the wrong format."),
    (InvalidTokenError, "Invalid CSRF token."),
])
def test_all_failures_are_403(error_class, reason):
    error = error_class()

    assert isinstance(error, CSRFError)
    assert error.status_code == 403
    assert error.reason == reason
    assert str(error) == reason


def test_custom_reason():
    assert NoTokenError("Header missing.").reason == "Header missing."


def test_request_context_in_details():
    error = invalid_token_error("POST", "/submit")

    assert error.details == {"method": "POST", "path": "/submit"}
    assert str(error) == "Invalid CSRF token. | Details: {'method': 'POST', 'path': '/submit'}"
    # the client-facing reason carries no context
    assert error.reason == "Invalid CSRF token."


def test_convenience_constructors():
    assert isinstance(no_session_error(), NoSessionError)
    assert isinstance(no_token_error("PUT", "/x"), NoTokenError)
    assert malformed_token_error(12).details == {"token_length": 12}
    assert malformed_token_error().details == {}


def test_config_error_is_not_a_request_failure():
    error = config_error("bad digest", "digest")

    assert isinstance(error, CSRFBaseException)
    assert not isinstance(error, CSRFError)
    assert error.details == {"component": "digest"}
