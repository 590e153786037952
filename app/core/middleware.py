"""
HTTP middleware: security headers and navigation-time route guarding.
"""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from app.access.context import get_access_control_engine
from app.access.guard import GuardState, RouteGuard
from app.core.auth import authenticate_request

log = structlog.get_logger()

LOGIN_ROUTE = "/login"

# Anything under these prefixes is an API or system call, not a page
UNGUARDED_PREFIXES = ("/api", "/auth", "/health", "/ready", "/docs", "/redoc", "/openapi.json")

LOADING_PLACEHOLDER = (
    "<!doctype html><html><head><meta charset=\"utf-8\">"
    "<meta http-equiv=\"refresh\" content=\"1\"></head>"
    "<body><p>Verificando permissões...</p></body></html>"
)

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "img-src 'self' data:; "
        "connect-src 'self'; "
        "frame-ancestors 'none';"
    ),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


# ---------------------------------------------------------------------------
# Route Guard
# ---------------------------------------------------------------------------

def is_page_request(path: str) -> bool:
    return not any(
        path == prefix or path.startswith(prefix + "/") for prefix in UNGUARDED_PREFIXES
    )


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Enforce per-user route access on every page request.

    Order of checks:
    - roster still loading: placeholder, never page content
    - signed out: only public routes, everything else goes to /login
    - signed in on /login: back to /
    - otherwise the RouteGuard decision
    """

    def __init__(self, app, guard: RouteGuard | None = None):
        super().__init__(app)
        self._guard = guard or RouteGuard()

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if not is_page_request(path):
            return await call_next(request)

        engine = get_access_control_engine(request.app)
        if engine.is_loading:
            return HTMLResponse(LOADING_PLACEHOLDER, status_code=503, headers={"Retry-After": "1"})

        identity = authenticate_request(request)
        is_public = path in self._guard.public_routes
        if identity is None:
            if is_public:
                return await call_next(request)
            return RedirectResponse(LOGIN_ROUTE, status_code=303)
        if path == LOGIN_ROUTE:
            return RedirectResponse("/", status_code=303)

        auth = engine.resolve(identity.email)
        decision = self._guard.evaluate(path, engine.is_loading, auth)

        if decision.state == GuardState.ALLOWED:
            return await call_next(request)

        if decision.state == GuardState.REDIRECTING:
            log.info(
                "route_guard.redirect",
                path=path,
                redirect_to=decision.redirect_to,
                org_user_id=str(auth.current_user.id) if auth.current_user else None,
            )
            return RedirectResponse(decision.redirect_to, status_code=303)

        log.warning("route_guard.denied", path=path, state=decision.state.value)
        return JSONResponse(
            status_code=403,
            content={"detail": "No dashboard route is available for this user"},
        )
