# csrf_guard/middleware/csrf_middleware.py
"""
CSRF middleware for Starlette/FastAPI applications.

Must run inside the session middleware, i.e. be added *before*
``SessionMiddleware`` with ``app.add_middleware`` (the last one added is
the outermost).
"""

import logging
from typing import Iterable, Optional, Union

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from csrf_guard.core.config import CSRFConfig
from csrf_guard.core.exceptions import CSRFError, config_error
from csrf_guard.core.security.protect import SCOPE_KEY, CSRFProtect, protect_for_request
from csrf_guard.middleware.token_retrieval import RetrievalCallable, TokenRetrieval

logger = logging.getLogger(__name__)


class CSRFMiddleware(BaseHTTPMiddleware):
    """Rejects state-changing requests without a valid CSRF token"""

    def __init__(
        self,
        app: ASGIApp,
        ignored_methods: Optional[Iterable[str]] = None,
        token_retrieval: Union[TokenRetrieval, RetrievalCallable, None] = None,
        config: Optional[CSRFConfig] = None,
        protect: Optional[CSRFProtect] = None
    ):
        super().__init__(app)
        if protect is not None and (
            ignored_methods is not None or token_retrieval is not None or config is not None
        ):
            raise config_error(
                "Pass either protect= or ignored_methods/token_retrieval/config, not both",
                "protect"
            )
        self.protect = protect or CSRFProtect(
            config=config,
            token_retrieval=token_retrieval,
            ignored_methods=ignored_methods
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Route handlers mint tokens through create_token() with this instance
        request.scope[SCOPE_KEY] = self.protect

        if self.protect.is_exempt(request.method):
            return await call_next(request)

        try:
            await self.protect.validate_request(request)
        except CSRFError as e:
            return self.reject(request, e)

        return await call_next(request)

    def reject(self, request: Request, error: CSRFError) -> Response:
        """403 response carrying the failure reason"""
        logger.warning(f"🚫 CSRF check failed: {request.method} {request.url.path} - {error.reason}")
        return JSONResponse(
            status_code=error.status_code,
            content={"detail": error.reason}
        )


async def csrf_protect_dependency(request: Request) -> None:
    """
    FastAPI dependency running the CSRF check on a single route.

    Use with ``dependencies=[Depends(csrf_protect_dependency)]`` when the
    middleware is not installed application-wide.
    """
    try:
        await protect_for_request(request).validate_request(request)
    except CSRFError as e:
        logger.warning(f"🚫 CSRF check failed: {request.method} {request.url.path} - {e.reason}")
        raise HTTPException(status_code=e.status_code, detail=e.reason)
