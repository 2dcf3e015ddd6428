# tests/conftest.py
"""
Shared fixtures for CSRF Guard tests.
"""

import pytest
from fastapi.testclient import TestClient

from csrf_guard.core.security import CSRFProtect

from tests.app_factory import build_app


@pytest.fixture
def protect():
    """Default CSRF protection (HMAC-SHA256, GET/HEAD/OPTIONS exempt)"""
    return CSRFProtect()


@pytest.fixture
def app(protect):
    return build_app(protect)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def issued_token(client):
    """A token minted for the client's session (session cookie kept by client)"""
    response = client.get("/token")
    assert response.status_code == 200
    return response.headers["csrf-token"]
