import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.datastructures import MutableHeaders

from rowkeeper.config import settings
from rowkeeper.core.cookies import append_set_cookie_headers
from rowkeeper.core.dependencies import AuthenticationRequired
from rowkeeper.core.limiter import limiter
from rowkeeper.modules.auth import routes as auth_routes
from rowkeeper.modules.users import routes as users_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


class UnhandledErrorMiddleware:
    """Turn unhandled exceptions into a 500 JSON response inside the other middlewares,
    so session cookies and security headers are still applied to it."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as exc:
            if response_started:
                raise
            logger.exception("Unhandled exception: %s", exc)
            if settings.is_production:
                response = JSONResponse(status_code=500, content={"detail": "Internal server error"})
            else:
                response = JSONResponse(status_code=500, content={"detail": str(exc)})
            await response(scope, receive, send)


class SessionCookieMiddleware:
    """Attach the Set-Cookie headers queued by the request's session client to the response."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})

        async def send_with_cookies(message):
            if message["type"] == "http.response.start":
                session_client = state.get("session_client")
                if session_client is not None:
                    append_set_cookie_headers(
                        MutableHeaders(scope=message),
                        session_client.get_set_cookie_headers(),
                    )
            await send(message)

        await self.app(scope, receive, send_with_cookies)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(UnhandledErrorMiddleware)
app.add_middleware(SessionCookieMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.supabase_url or not settings.supabase_anon_key:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; sign in will fail")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe"""
    return {"status": "ready"}
