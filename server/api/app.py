"""FastAPI application setup."""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from api.routes import chat, schedules
from api.routes.health import router as health_router
from api.schemas.response_schemas import ErrorResponse
from config.logging_config import setup_logging
from config.settings import Settings, get_settings
from core.dependencies import (
    get_notification_service,
    get_schedule_repo,
    init_dependencies,
    shutdown_dependencies,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    # Setup logging
    setup_logging(settings.LOG_LEVEL)

    # -----------------------------------------------------------------------
    # Lifespan (replaces deprecated @app.on_event)
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle."""
        # STARTUP
        init_dependencies(settings)
        stored = await get_schedule_repo().load()
        await get_notification_service().reschedule_all(stored)
        logger.info("Application started")
        yield
        # SHUTDOWN
        await shutdown_dependencies()
        logger.info("Application shut down")

    app = FastAPI(
        title="Biseo API",
        description="Korean natural-language assistant for schedules, weather, places and transit",
        version="1.0.0",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # CORS: never combine allow_credentials=True with allow_origins=["*"]
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(detail="Internal server error", error_code="internal_error").model_dump(),
        )

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(chat.router, prefix="/chat", tags=["Chat"])
    app.include_router(schedules.router, prefix="/schedules", tags=["Schedules"])

    logger.info("FastAPI application created")
    return app
