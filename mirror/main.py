"""
Magic Mirror FastAPI application entry point.

Admin writes bump the config version; the display polls it and reloads.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mirror import __version__
from mirror.config import get_settings
from mirror.db.session import check_db_connection, create_tables, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Refuse to start without a reachable store; create tables when configured."""
    logger.info("Magic Mirror starting (build %s)", get_settings().build_time)
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        if get_settings().auto_create_tables:
            create_tables()
            logger.info("Database tables ensured")

        yield
    finally:
        logger.info("Magic Mirror shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg", "Invalid request"))
    return message.removeprefix("Value error, ")


def create_app() -> FastAPI:
    """Build the mirror API: error envelope, display routes and admin routes."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _first_validation_message(exc)})

    # Routers import models, so mount them after the app exists
    from mirror.api.admin_ai import router as admin_ai_router
    from mirror.api.admin_calendar import router as admin_calendar_router
    from mirror.api.admin_commute import router as admin_commute_router
    from mirror.api.admin_geocode import router as admin_geocode_router
    from mirror.api.admin_mirror import router as admin_mirror_router
    from mirror.api.admin_settings import router as admin_settings_router
    from mirror.api.admin_weather import router as admin_weather_router
    from mirror.api.admin_widgets import router as admin_widgets_router
    from mirror.api.auth import router as auth_router
    from mirror.api.public import router as public_router
    from mirror.api.spotify import router as spotify_router

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(public_router, prefix="/api", tags=["display"])
    app.include_router(spotify_router, prefix="/api/spotify", tags=["spotify"])

    app.include_router(admin_calendar_router, prefix="/api/admin/calendar", tags=["admin"])
    app.include_router(admin_commute_router, prefix="/api/admin/commute", tags=["admin"])
    app.include_router(admin_widgets_router, prefix="/api/admin/widgets", tags=["admin"])
    app.include_router(admin_settings_router, prefix="/api/admin/settings", tags=["admin"])
    app.include_router(admin_weather_router, prefix="/api/admin/weather", tags=["admin"])
    app.include_router(admin_ai_router, prefix="/api/admin", tags=["admin"])
    app.include_router(admin_mirror_router, prefix="/api/admin/mirror", tags=["admin"])
    app.include_router(admin_geocode_router, prefix="/api/admin/geocode", tags=["admin"])

    @app.get("/health")
    def health() -> dict:
        """Liveness check for the process supervisor; 503 when the store is down."""
        try:
            check_db_connection()
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
