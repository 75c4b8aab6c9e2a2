"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn skipro.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import goals, health, sessions, weather
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup; nothing to clean up on shutdown."""
    settings = get_settings()

    logger.info(
        "SkiPro API starting",
        extra={
            "version": settings.api_version,
            "video_mock_mode": settings.video_mock_mode,
            "synthetic_weather_fallback": settings.weather_synthetic_fallback,
        }
    )

    # Missing credentials only degrade features, so keep going
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.warning(
            "Missing configuration, running degraded",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("SkiPro API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Called once at startup, or per test with different settings.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        AI ski and snowboard coach.

        ## Features

        - Pick a training goal and upload a clip for technique analysis
        - Get a written report, a score and spoken feedback
        - Ask the coach follow-up questions
        - Check resort weather with a ski-suitability advisory

        ## Authentication

        All `/api/v1` endpoints require an API key in the `X-API-Key` header.

        ## Workflow

        1. **Start**: `POST /api/v1/sessions`
        2. **Pick a goal**: `GET /api/v1/goals`, then `POST /api/v1/sessions/{id}/goal`
        3. **Upload**: `POST /api/v1/sessions/{id}/video`
        4. **Analyze**: `POST /api/v1/sessions/{id}/analyze`
        5. **Chat**: `POST /api/v1/sessions/{id}/chat/open`, then `POST /api/v1/sessions/{id}/chat`

        Weather: `GET /api/v1/weather/resorts`, `GET /api/v1/weather/resorts/{id}`,
        then `POST /api/v1/weather/advisory` with the returned reading.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Origins come from the CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        goals.router,
        prefix="/api/v1/goals",
        tags=["Goals"],
    )

    app.include_router(
        sessions.router,
        prefix="/api/v1/sessions",
        tags=["Sessions"],
    )

    app.include_router(
        weather.router,
        prefix="/api/v1/weather",
        tags=["Weather"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "SkiPro AI API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side but returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please try again."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "skipro.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
