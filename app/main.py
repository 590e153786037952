"""
Painel API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.access.context import get_access_control_engine, install_access_control
from app.access.engine import AccessControlEngine
from app.core.config import get_settings
from app.core.database import async_session_factory
from app.core.logging import configure_logging
from app.core.middleware import RouteGuardMiddleware, SecurityHeadersMiddleware
from app.api import pages
from app.api.ai import router as ai_router
from app.api.v1 import router as api_v1_router
from app.services.access_store import AccessControlStore
from app.services.ai_proxy import AIWebhookProxy

settings = get_settings()
log = structlog.get_logger()


def create_app(
    engine: Optional[AccessControlEngine] = None,
    ai_proxy: Optional[AIWebhookProxy] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Painel",
        description="Marketing analytics dashboard with per-user route access control.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    if engine is None:
        engine = AccessControlEngine(
            AccessControlStore(async_session_factory),
            fail_closed=settings.access_fail_closed,
        )
    install_access_control(app, engine)
    app.state.ai_proxy = ai_proxy or AIWebhookProxy(
        settings.ai_webhook_url, timeout_seconds=settings.ai_webhook_timeout_seconds
    )

    # Middleware (last added is outermost)
    app.add_middleware(RouteGuardMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(api_v1_router, prefix="/api/v1")
    app.include_router(ai_router, prefix="/api/ai", tags=["AI Assistant"])
    app.include_router(pages.router)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Ready once the access control roster has loaded without error."""
        access = get_access_control_engine(app)
        if access.is_loading:
            return JSONResponse(status_code=503, content={"status": "loading"})
        if access.error:
            return JSONResponse(
                status_code=503, content={"status": "degraded", "error": access.error}
            )
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        configure_logging(settings.log_level, settings.log_format)
        log.info("Painel starting")
        await app.state.ai_proxy.open()
        await get_access_control_engine(app).refresh()

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Painel shutting down")
        await app.state.ai_proxy.close()

    return app


app = create_app()
