"""
FastAPI dependency injection.

This is the composition root. External clients are built lazily, once
per process, and handed to the core services; nothing in `core` reaches
for a global client. Tests replace any provider here through
`app.dependency_overrides`.
"""

import logging
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.advisory.orchestrator import AdvisoryService, TextModelClient
from ..core.coaching.coach import SkiCoach, SpeechClient, VisionModelClient
from ..core.weather.gateway import WeatherDataProvider, WeatherGateway
from ..infrastructure.anthropic.client import AnthropicVisionClient, create_anthropic_client
from ..infrastructure.gemini.client import create_speech_client
from ..infrastructure.memory.sessions import InMemorySessionRepository
from ..infrastructure.qveris.client import create_qveris_client
from ..infrastructure.video.processor import VideoProcessor, create_video_processor

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Process-wide clients (built once, on first use)
# ---------------------------------------------------------------------------

@lru_cache()
def get_model_client() -> Optional[AnthropicVisionClient]:
    """Claude client shared by analysis, chat and advisories. None without a key."""
    settings = get_settings()
    return create_anthropic_client(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
        temperature=settings.anthropic_temperature,
    )


@lru_cache()
def get_speech_client() -> Optional[SpeechClient]:
    settings = get_settings()
    return create_speech_client(
        api_key=settings.gemini_api_key,
        model=settings.gemini_tts_model,
        voice=settings.gemini_voice,
    )


@lru_cache()
def get_weather_provider() -> Optional[WeatherDataProvider]:
    settings = get_settings()
    return create_qveris_client(
        api_key=settings.qveris_api_key,
        base_url=settings.qveris_base_url,
        timeout_seconds=settings.qveris_timeout_seconds,
    )


@lru_cache()
def get_video_processor() -> Optional[VideoProcessor]:
    """
    Keyframe extractor. None when FFmpeg is missing, in which case
    uploads are accepted without keyframes and analysis reports it.
    """
    settings = get_settings()
    try:
        return create_video_processor(mock_mode=settings.video_mock_mode)
    except RuntimeError as e:
        logger.error("Video processor unavailable", extra={"error": str(e)})
        return None


@lru_cache()
def get_session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@lru_cache()
def get_weather_gateway() -> WeatherGateway:
    """Shared so the last resort listing can be resolved by id."""
    settings = get_settings()
    return WeatherGateway(
        provider=get_weather_provider(),
        timeout_seconds=settings.weather_timeout_seconds,
        synthetic_fallback=settings.weather_synthetic_fallback,
        default_city=settings.default_resort_city,
        default_keywords=settings.default_resort_keywords,
    )


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_advisory_service(
    settings: Annotated[Settings, Depends(get_settings)],
    model_client: Annotated[Optional[TextModelClient], Depends(get_model_client)],
) -> AdvisoryService:
    """Stateless, so a fresh instance per request is fine."""
    return AdvisoryService(
        model_client=model_client,
        timeout_seconds=settings.advisory_timeout_seconds,
        temperature=settings.advisory_temperature,
    )


def get_ski_coach(
    settings: Annotated[Settings, Depends(get_settings)],
    vision_client: Annotated[Optional[VisionModelClient], Depends(get_model_client)],
    speech_client: Annotated[Optional[SpeechClient], Depends(get_speech_client)],
) -> SkiCoach:
    return SkiCoach(
        vision_client=vision_client,
        speech_client=speech_client,
        analysis_timeout_seconds=settings.analysis_timeout_seconds,
        speech_text_limit=settings.speech_text_limit,
    )


def reset_clients() -> None:
    """Drop cached clients and state. Used by tests and after config changes."""
    for provider in (
        get_model_client,
        get_speech_client,
        get_weather_provider,
        get_video_processor,
        get_session_repository,
        get_weather_gateway,
    ):
        provider.cache_clear()


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
AdvisoryServiceDep = Annotated[AdvisoryService, Depends(get_advisory_service)]
SkiCoachDep = Annotated[SkiCoach, Depends(get_ski_coach)]
WeatherGatewayDep = Annotated[WeatherGateway, Depends(get_weather_gateway)]
SessionRepositoryDep = Annotated[InMemorySessionRepository, Depends(get_session_repository)]
VideoProcessorDep = Annotated[Optional[VideoProcessor], Depends(get_video_processor)]
