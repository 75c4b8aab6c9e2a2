"""
Health check endpoints.

- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check with the state of each integration

Missing AI or weather credentials don't make the service unready,
since every feature has a degraded mode; they show up as "degraded"
checks instead. Only a broken session store makes it unready.
"""

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ... import __version__
from ..dependencies import SessionRepositoryDep, SettingsDep, VideoProcessorDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Standardized format makes it easy for monitoring tools to parse."""
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok", "degraded" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "video_mock_mode": settings.video_mock_mode,
            "synthetic_weather_fallback": settings.weather_synthetic_fallback,
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Reports each integration. Returns 503 only if sessions can't be stored.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    settings: SettingsDep,
    repository: SessionRepositoryDep,
    video_processor: VideoProcessorDep,
):
    checks: list[ReadinessCheck] = []
    all_ok = True

    try:
        len(repository)
        checks.append(ReadinessCheck(name="sessions", status="ok"))
    except Exception as e:
        logger.error("Session store check failed", extra={"error": str(e)})
        checks.append(ReadinessCheck(name="sessions", status="error", error=str(e)))
        all_ok = False

    credentials = {
        "anthropic": (settings.anthropic_api_key, "analysis and chat unavailable, advisories use rules"),
        "gemini": (settings.gemini_api_key, "spoken feedback disabled"),
        "qveris": (settings.qveris_api_key, "weather is synthetic, resorts are the built-in list"),
    }
    for name, (key, consequence) in credentials.items():
        if key:
            checks.append(ReadinessCheck(name=name, status="ok"))
        else:
            checks.append(ReadinessCheck(name=name, status="degraded", error=f"API key not configured: {consequence}"))

    if video_processor is None:
        checks.append(ReadinessCheck(name="video", status="degraded", error="FFmpeg not available"))
    else:
        checks.append(ReadinessCheck(name="video", status="ok"))

    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )

    if not all_ok:
        logger.warning(
            "Readiness check failed",
            extra={"checks": [c.model_dump() for c in checks]},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response
