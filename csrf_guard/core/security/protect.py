# csrf_guard/core/security/protect.py
"""
CSRF protection service.

Ties together the secret manager, the token codec and the retrieval
strategy. The middleware delegates its decision to ``validate_request``;
route handlers mint tokens with ``create_token``.

Holds no per-request state: one instance is shared by all requests.
"""

import html
import logging
from typing import Iterable, Optional, Union

from starlette.requests import HTTPConnection, Request

from csrf_guard.core.config import CSRFConfig
from csrf_guard.core.exceptions import invalid_token_error
from csrf_guard.core.security.secret_manager import SecretManager
from csrf_guard.core.security.token_codec import TokenCodec
from csrf_guard.middleware.token_retrieval import (
    TOKEN_FIELD,
    RetrievalCallable,
    TokenRetrieval,
    resolve_token_retrieval,
)

logger = logging.getLogger(__name__)

# ASGI scope key under which the middleware publishes its instance
SCOPE_KEY = "csrf_protect"


class CSRFProtect:
    """
    Issues and checks session-bound CSRF tokens.

    Design decisions:
    1. Stateless tokens - validity is recomputed from salt and secret
    2. Strategy injection - token retrieval is replaceable at construction
    3. Fail-closed - every failure raises a CSRFError (HTTP 403)
    """

    def __init__(
        self,
        config: Optional[CSRFConfig] = None,
        token_retrieval: Union[TokenRetrieval, RetrievalCallable, None] = None,
        ignored_methods: Optional[Iterable[str]] = None
    ):
        config = config or CSRFConfig()
        if ignored_methods is not None:
            config = config.model_copy(update={
                "ignored_methods": CSRFConfig(ignored_methods=ignored_methods).ignored_methods
            })
        self.config = config
        self.secret_manager = SecretManager(config.session_key)
        self.codec = TokenCodec(config.digest)
        self.token_retrieval = resolve_token_retrieval(token_retrieval)

    @property
    def ignored_methods(self) -> frozenset:
        return self.config.ignored_methods

    def is_exempt(self, method: str) -> bool:
        """True if requests with ``method`` skip the CSRF check"""
        return method.upper() in self.config.ignored_methods

    def create_token(self, request: HTTPConnection) -> str:
        """
        Mint a new token for the session attached to ``request``.

        Put it in the ``csrf-token`` response header or a hidden ``_csrf``
        form field; the client echoes it back on the next mutating request.

        Raises:
            NoSessionError: If no session is attached to the request
        """
        secret = self.secret_manager.secret_for_request(request)
        return self.codec.issue(secret)

    def form_field(self, request: HTTPConnection) -> str:
        """Hidden HTML input carrying a fresh token"""
        token = html.escape(self.create_token(request), quote=True)
        return f"<input type='hidden' name='{TOKEN_FIELD}' value='{token}'>"

    async def validate_request(self, request: Request) -> None:
        """
        Run the CSRF check for ``request``.

        Order is fixed: method check, secret fetch, token retrieval, verify.

        Raises:
            NoSessionError: No session attached
            NoTokenError: No candidate token in the request
            MalformedTokenError: Token lacks the salt-digest shape
            InvalidTokenError: Digest mismatch
        """
        if self.is_exempt(request.method):
            return

        secret = self.secret_manager.secret_for_request(request)
        token = await self.token_retrieval.extract(request)

        if not self.codec.verify(token, secret):
            raise invalid_token_error(request.method, request.url.path)


# Global instance - initialized by the application at startup
csrf_protect: Optional[CSRFProtect] = None


def init_csrf_protect(
    config: Optional[CSRFConfig] = None,
    token_retrieval: Union[TokenRetrieval, RetrievalCallable, None] = None,
    ignored_methods: Optional[Iterable[str]] = None
) -> CSRFProtect:
    """Create the application-wide CSRFProtect instance"""
    global csrf_protect
    csrf_protect = CSRFProtect(
        config=config,
        token_retrieval=token_retrieval,
        ignored_methods=ignored_methods
    )
    logger.info(
        f"🛡️ CSRF protection initialized (digest={csrf_protect.config.digest}, "
        f"ignored={sorted(csrf_protect.ignored_methods)})"
    )
    return csrf_protect


def get_csrf_protect() -> CSRFProtect:
    """Get the application-wide instance, creating a default one if needed"""
    global csrf_protect
    if csrf_protect is None:
        csrf_protect = CSRFProtect()
    return csrf_protect


def protect_for_request(request: HTTPConnection) -> CSRFProtect:
    """
    The instance guarding ``request``.

    The one installed by ``CSRFMiddleware`` on this request if any,
    otherwise the application-wide instance.
    """
    protect = request.scope.get(SCOPE_KEY)
    if isinstance(protect, CSRFProtect):
        return protect
    return get_csrf_protect()


def create_token(request: HTTPConnection) -> str:
    """Mint a CSRF token for ``request`` with the instance guarding it"""
    return protect_for_request(request).create_token(request)


def csrf_form_field(request: HTTPConnection) -> str:
    """Render ``<input type='hidden' name='_csrf' value='TOKEN'>`` for ``request``"""
    return protect_for_request(request).form_field(request)
