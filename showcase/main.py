"""Literary Showcase — FastAPI application entry point."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from sqlalchemy import text

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from showcase.config import DEFAULT_APP_SECRET, DEFAULT_JWT_SECRET, settings
from showcase.database import engine, init_db
from showcase.engagement import build_engagement_guard
from showcase.logging_config import setup_logging
from showcase.maintenance import MaintenanceGate, maintenance_middleware
from showcase.rate_limit import limiter
from showcase.rum.store import RumStore
from showcase.services.site_settings import load_maintenance_status
from showcase.services.traffic import record_traffic_event

from showcase.api.auth import router as auth_router
from showcase.api.content import router as content_router
from showcase.api.maintenance import router as maintenance_router
from showcase.api.metrics import router as metrics_router
from showcase.api.rum import router as rum_router

logger = logging.getLogger("showcase")


def _startup_checks() -> None:
    """Log warnings for misconfigured or missing settings."""
    startup_errors: list[str] = []

    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        msg = "JWT_SECRET is using the default value — set a strong secret for production"
        logger.warning(f"⚠  {msg}")
        if settings.is_production:
            startup_errors.append(msg)

    if settings.app_secret == DEFAULT_APP_SECRET:
        msg = "APP_SECRET is using the default value — engagement cookies are forgeable"
        logger.warning(f"⚠  {msg}")
        if settings.is_production:
            startup_errors.append(msg)

    if settings.is_production and not settings.cors_origins_list:
        msg = "APP_ENV=production but CORS_ORIGINS is empty"
        logger.warning(f"⚠  {msg}")
        startup_errors.append(msg)

    if settings.strict_startup_validation and startup_errors:
        raise RuntimeError("Startup validation failed: " + " | ".join(startup_errors))

    if not (settings.admin_email and settings.admin_password):
        logger.info("○ ADMIN_EMAIL/ADMIN_PASSWORD not set — admin login disabled")
    if "sqlite" in settings.database_url:
        logger.info("○ Using SQLite — consider PostgreSQL for production workloads")
    logger.info(
        f"✓ RUM store: window={settings.rum_window_ms}ms capacity={settings.rum_capacity}"
        f" sample_rate={settings.rum_default_sample_rate}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    setup_logging(settings.log_level)
    _startup_checks()

    await init_db()
    logger.info("✦ Showcase API started")
    logger.info(f"  Database: {settings.database_url}")

    yield

    await engine.dispose()
    logger.info("✦ Showcase API shutting down")


def create_app() -> FastAPI:
    """Composition root: builds the app and its process-wide collaborators."""
    app = FastAPI(
        title="Literary Showcase",
        description="Content showcase API — RUM, traffic metrics and maintenance controls",
        version="0.4.0",
        lifespan=lifespan,
    )

    app.state.rum_store = RumStore(window_ms=settings.rum_window_ms, capacity=settings.rum_capacity)
    app.state.engagement_guard = build_engagement_guard()
    app.state.maintenance_gate = MaintenanceGate(
        load_maintenance_status, cache_seconds=settings.maintenance_cache_seconds
    )
    app.state.traffic_recorder = record_traffic_event

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Maintenance gate + pageview counting (page routes only)
    app.middleware("http")(maintenance_middleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing + access log middleware
    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response: Response = await call_next(request)

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    # Security headers middleware
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Routers
    app.include_router(auth_router)
    app.include_router(rum_router)
    app.include_router(metrics_router)
    app.include_router(maintenance_router)
    app.include_router(content_router)

    @app.get("/")
    async def root():
        return JSONResponse(
            {
                "service": "showcase-api",
                "status": "ok",
                "endpoints": {
                    "health": "/api/health",
                    "docs": "/docs",
                },
            }
        )

    @app.get("/maintenance")
    async def maintenance_page(request: Request):
        status = await request.app.state.maintenance_gate.current()
        return {"maintenanceMode": status.enabled, "message": status.message}

    @app.get("/api/health")
    async def health_check(request: Request):
        database_ready = await _db_ready()
        return {
            "status": "healthy" if database_ready else "degraded",
            "service": "showcase",
            "version": "0.4.0",
            "database_ready": database_ready,
            "rum_events": len(request.app.state.rum_store),
        }

    @app.get("/api/health/live")
    async def liveness_check():
        return {"status": "alive", "service": "showcase"}

    return app


async def _db_ready() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("database readiness check failed")
        return False


app = create_app()
