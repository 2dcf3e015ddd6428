# csrf_guard/core/security/secret_manager.py
"""
Per-session CSRF secret.

The secret is created lazily on first use and then kept for the lifetime
of the session. Regenerating it would invalidate every token already
handed out to the client.
"""

import logging
import secrets
from typing import Optional

from starlette.requests import HTTPConnection

from csrf_guard.core.config import DEFAULT_SESSION_KEY
from csrf_guard.core.exceptions import NoSessionError
from csrf_guard.core.security.session import SessionStore, session_from_request

logger = logging.getLogger(__name__)

SECRET_BYTES = 16


class SecretManager:
    """Reads or creates the CSRF secret stored in the session"""

    def __init__(self, session_key: str = DEFAULT_SESSION_KEY):
        self.session_key = session_key

    def get_or_create_secret(self, session: Optional[SessionStore]) -> str:
        """
        Return the session's CSRF secret, creating it if absent.

        Raises:
            NoSessionError: If no session is available
        """
        if session is None:
            raise NoSessionError()

        secret = session.get(self.session_key)
        if secret:
            return secret

        secret = secrets.token_hex(SECRET_BYTES)
        session.set(self.session_key, secret)
        logger.debug("Created CSRF secret for session")
        return secret

    def secret_for_request(self, request: HTTPConnection) -> str:
        """Fetch or create the secret for the session attached to ``request``"""
        session = session_from_request(request)
        if session is None:
            raise NoSessionError(method=request.scope.get("method"), path=request.url.path)
        return self.get_or_create_secret(session)
