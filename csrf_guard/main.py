# csrf_guard/main.py
"""
CSRF Guard demo application.

Wires Starlette's cookie sessions and the CSRF middleware into a FastAPI
app. ``GET /form`` mints a token (header and hidden form field),
``POST /submit`` only succeeds when the token is echoed back.
"""

from contextlib import asynccontextmanager
from datetime import datetime
import logging
import os
import secrets

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from csrf_guard import __version__
from csrf_guard.core.config import CSRFConfig, settings, validate_required_settings
from csrf_guard.core.exceptions import NoSessionError
from csrf_guard.core.logging_config import setup_logging
from csrf_guard.core.security import create_token, csrf_form_field, init_csrf_protect
from csrf_guard.middleware.csrf_middleware import CSRFMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler for startup/shutdown"""
    logger.info("=" * 60)
    logger.info(f"🚀 {settings.APP_NAME} starting...")
    logger.info("=" * 60)

    # Warn but don't fail
    if not validate_required_settings():
        logger.warning("⚠️ Some settings are missing - see warnings above")

    logger.info("📋 Configuration:")
    logger.info(f"  - Ignored methods: {sorted(csrf_protect.ignored_methods)}")
    logger.info(f"  - Digest: {csrf_protect.config.digest}")
    logger.info(f"  - Session key: {csrf_protect.config.session_key}")
    logger.info("✅ Ready!")

    yield

    logger.info(f"🛑 {settings.APP_NAME} shutting down...")


# Setup logging
logger = setup_logging()


def get_session_secret_key() -> str:
    """Get the session signing key from settings or generate one for development"""
    secret_key = settings.SESSION_SECRET_KEY or os.getenv("SESSION_SECRET_KEY")
    if not secret_key:
        secret_key = secrets.token_urlsafe(32)
        logger.warning("⚠️ No SESSION_SECRET_KEY set. Generated temporary key.")
        logger.warning("⚠️ Sessions (and CSRF tokens) will not survive a restart!")
    else:
        logger.info("✅ Session key configured from environment")
    return secret_key


csrf_protect = init_csrf_protect(CSRFConfig.from_settings())

app = FastAPI(
    title=settings.APP_NAME,
    description="Session-bound CSRF protection demo",
    version=__version__,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None
)

# Last added runs first: sessions must be loaded before the CSRF check
app.add_middleware(CSRFMiddleware, protect=csrf_protect)
app.add_middleware(SessionMiddleware, secret_key=get_session_secret_key(), same_site="lax")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    if request.url.path != "/health":
        logger.info(f"📥 Request: {request.method} {request.url.path}")
    return await call_next(request)


@app.get("/", status_code=200)
def read_root():
    return {"status": "ok", "version": __version__, "service": "csrf-guard"}


@app.get("/health", status_code=200)
def health():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/healthz", response_class=PlainTextResponse, status_code=200)
def healthz():
    return "OK"


@app.get("/form", response_class=HTMLResponse)
async def form(request: Request):
    """
    Render a form with a fresh CSRF token.

    The same token is exposed in the ``csrf-token`` response header for
    script clients.
    """
    token = create_token(request)
    body = (
        "<form method='post' action='/submit'>"
        f"{csrf_form_field(request)}"
        "<input type='text' name='message'>"
        "<button type='submit'>Send</button>"
        "</form>"
    )
    return HTMLResponse(content=body, headers={settings.CSRF_TOKEN_HEADER: token})


@app.get("/token")
async def token(request: Request):
    """Mint a CSRF token as JSON"""
    try:
        return {"token": create_token(request)}
    except NoSessionError as e:
        logger.error(f"❌ Token requested without session: {e}")
        return PlainTextResponse(e.reason, status_code=e.status_code)


@app.post("/submit")
async def submit(request: Request):
    """Protected endpoint - only reached with a valid CSRF token"""
    body = await request.body()
    logger.debug(f"Accepted submission ({len(body)} bytes)")
    return PlainTextResponse("POST request succeeded.")


# Main entry point
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"🚀 Starting server on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
