# csrf_guard/middleware/token_retrieval.py
"""
Token retrieval strategies.

A strategy maps a request to the candidate CSRF token. The middleware
takes one at construction time; ``DefaultTokenRetrieval`` is used when
none is given.
"""

import inspect
import json
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Sequence, Union

from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from csrf_guard.core.exceptions import config_error, no_token_error

logger = logging.getLogger(__name__)

TOKEN_FIELD = "_csrf"

# Checked in this order; first header present wins
TOKEN_HEADERS = (
    "_csrf",
    "csrf-token",
    "xsrf-token",
    "x-csrf-token",
    "x-xsrf-token",
    "x-csrftoken",
)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

RetrievalCallable = Callable[[Request], Union[str, Awaitable[str]]]


class TokenRetrieval(ABC):
    """Extracts the candidate CSRF token from a request"""

    @abstractmethod
    async def extract(self, request: Request) -> str:
        """
        Return the candidate token.

        Raises:
            NoTokenError: If the request carries no token
        """


class DefaultTokenRetrieval(TokenRetrieval):
    """
    Looks for the token in the path/query parameter ``_csrf``, then in the
    known CSRF headers, then in a ``_csrf`` body field (form or JSON).
    """

    def __init__(
        self,
        field_name: str = TOKEN_FIELD,
        header_names: Sequence[str] = TOKEN_HEADERS
    ):
        self.field_name = field_name
        self.header_names = tuple(header_names)

    async def extract(self, request: Request) -> str:
        token = self._from_params(request)
        if token is None:
            token = self._from_headers(request)
        if token is None:
            token = await self._from_body(request)
        if token is None:
            raise no_token_error(request.method, request.url.path)
        return token

    def _from_params(self, request: Request) -> Optional[str]:
        value = request.path_params.get(self.field_name) or request.query_params.get(self.field_name)
        return value or None

    def _from_headers(self, request: Request) -> Optional[str]:
        # Starlette headers are case-insensitive
        for name in self.header_names:
            value = request.headers.get(name)
            if value:
                return value
        return None

    async def _from_body(self, request: Request) -> Optional[str]:
        content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
        if not content_type:
            return None

        # Read the raw body first so it is cached for the downstream handler
        body = await request.body()
        if not body:
            return None

        if content_type in FORM_CONTENT_TYPES:
            try:
                form = await request.form()
            except (HTTPException, MultiPartException) as e:
                # Starlette raises HTTPException(400) for broken multipart bodies inside an app
                logger.debug(f"Request body is not a valid form, no CSRF token read from it: {e}")
                return None
            value = form.get(self.field_name)
            return value if isinstance(value, str) and value else None

        if content_type == "application/json" or content_type.endswith("+json"):
            try:
                payload = json.loads(body)
            except (ValueError, UnicodeDecodeError):
                logger.debug("Request body is not valid JSON, no CSRF token read from it")
                return None
            if isinstance(payload, dict):
                value = payload.get(self.field_name)
                return value if isinstance(value, str) and value else None

        return None


class FunctionTokenRetrieval(TokenRetrieval):
    """Wraps a plain sync or async callable as a retrieval strategy"""

    def __init__(self, func: RetrievalCallable):
        if not callable(func):
            raise config_error("Token retrieval must be callable", "token_retrieval")
        self.func = func

    async def extract(self, request: Request) -> str:
        result = self.func(request)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            raise no_token_error(request.method, request.url.path)
        return result


def resolve_token_retrieval(
    strategy: Union[TokenRetrieval, RetrievalCallable, None]
) -> TokenRetrieval:
    """Turn the configured retrieval option into a strategy object"""
    if strategy is None:
        return DefaultTokenRetrieval()
    if isinstance(strategy, TokenRetrieval):
        return strategy
    return FunctionTokenRetrieval(strategy)
