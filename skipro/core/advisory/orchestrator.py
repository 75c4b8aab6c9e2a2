"""
Advisory orchestration: AI first, rules as the safety net.

The model reply is untrusted. It is parsed, validated against the
Advisory shape, and discarded in favour of the rule-based classifier on
any problem (timeout, transport error, bad JSON, wrong shape). Callers
always get a well-formed Advisory and never see the failure.
"""

import asyncio
import json
import logging
import re
from typing import Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .classifier import classify
from .models import Advisory, AdvisoryLevel, WeatherObservation


logger = logging.getLogger(__name__)

DEFAULT_ADVISORY_TIMEOUT_SECONDS = 15.0


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class TextModelClient(Protocol):
    """Anything that can turn a prompt into text."""

    async def complete(
        self,
        prompt: str,
        system_prompt: str,
        temperature: Optional[float] = None,
    ) -> str:
        """Return the model's text reply."""
        ...


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

ADVISORY_SYSTEM_PROMPT = """You are a professional ski instructor who gives short, practical advice about the day's skiing conditions. You always answer with a single JSON object and nothing else."""


ADVISORY_PROMPT_TEMPLATE = """Based on the weather below, write concise ski advice for {audience}.

Weather:
- Location: {location}
- Temperature: {temp}°C (feels like {feelslike}°C)
- Wind speed: {windspeed} km/h
- Humidity: {humidity}%
- Snowfall: {snow} mm
- Snow depth: {snowdepth} cm
- Visibility: {visibility} km
- UV index: {uvindex}
- Conditions: {conditions}

Reply with JSON only (no markdown code block):
{{
  "level": "excellent/good/caution/warning",
  "title": "One sentence summarising today's conditions",
  "suggestions": ["suggestion 1", "suggestion 2", "suggestion 3"],
  "beginnerTips": {tips_shape}
}}

Levels:
- excellent: temperature -15 to -5°C, wind < 15 km/h, visibility > 10 km
- good: temperature -20 to 0°C, wind < 25 km/h, visibility > 5 km
- caution: temperature < -20°C or > 0°C, wind 25-40 km/h, extra care needed
- warning: extreme weather, skiing not recommended"""


def build_advisory_prompt(observation: WeatherObservation, beginner_mode: bool) -> str:
    return ADVISORY_PROMPT_TEMPLATE.format(
        audience="a beginner" if beginner_mode else "a keen skier",
        location=observation.location,
        temp=observation.temp,
        feelslike=observation.feelslike,
        windspeed=observation.windspeed,
        humidity=observation.humidity,
        snow=observation.snow,
        snowdepth=observation.snowdepth,
        visibility=observation.visibility,
        uvindex=observation.uvindex,
        conditions=observation.conditions,
        tips_shape='["beginner tip 1", "beginner tip 2"]' if beginner_mode else "null",
    )


# ---------------------------------------------------------------------------
# Payload validation
# ---------------------------------------------------------------------------

class AdvisoryPayloadError(ValueError):
    """Raised when the model reply cannot be turned into an Advisory."""
    pass


class AdvisoryPayload(BaseModel):
    """Shape the model must return. Unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    level: Literal["excellent", "good", "caution", "warning"]
    title: str = Field(min_length=1)
    suggestions: list[str]
    beginner_tips: Optional[list[str]] = Field(default=None, alias="beginnerTips")


_CODE_FENCE = re.compile(r"```(?:json)?\s*")


def parse_advisory_payload(raw: str, beginner_mode: bool) -> Advisory:
    """
    Turn a model reply into an Advisory.

    Strips Markdown code fences first since models add them even when
    told not to. Tips are required in beginner mode and dropped
    otherwise, so the presence of tips always matches the mode.
    """
    cleaned = _CODE_FENCE.sub("", raw).strip()
    if not cleaned:
        raise AdvisoryPayloadError("Empty advisory reply")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AdvisoryPayloadError(f"Advisory reply is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise AdvisoryPayloadError("Advisory reply is not a JSON object")

    try:
        payload = AdvisoryPayload.model_validate(data)
    except ValidationError as e:
        raise AdvisoryPayloadError(f"Advisory reply has the wrong shape: {e}") from e

    if beginner_mode and payload.beginner_tips is None:
        raise AdvisoryPayloadError("Beginner mode requested but reply has no beginnerTips")

    return Advisory(
        level=AdvisoryLevel(payload.level),
        title=payload.title,
        suggestions=tuple(payload.suggestions),
        beginner_tips=tuple(payload.beginner_tips) if beginner_mode else None,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AdvisoryService:
    """
    Produces advisories, preferring the model and falling back to rules.

    Holds no per-call state. The model client is injected; pass None
    when no credential is configured and every call goes straight to
    the classifier without a wasted round-trip.
    """

    def __init__(
        self,
        model_client: Optional[TextModelClient] = None,
        timeout_seconds: float = DEFAULT_ADVISORY_TIMEOUT_SECONDS,
        temperature: float = 0.3,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._model_client = model_client
        self._timeout_seconds = timeout_seconds
        self._temperature = temperature

    @property
    def uses_model(self) -> bool:
        return self._model_client is not None

    async def get_advisory(
        self,
        observation: WeatherObservation,
        beginner_mode: bool,
    ) -> Advisory:
        """Return an Advisory. Completes within the timeout plus rule evaluation."""
        if self._model_client is None:
            logger.debug("No advisory model configured, using rules")
            return classify(observation, beginner_mode)

        try:
            raw = await asyncio.wait_for(
                self._model_client.complete(
                    prompt=build_advisory_prompt(observation, beginner_mode),
                    system_prompt=ADVISORY_SYSTEM_PROMPT,
                    temperature=self._temperature,
                ),
                timeout=self._timeout_seconds,
            )
            advisory = parse_advisory_payload(raw, beginner_mode)
        except asyncio.TimeoutError:
            logger.warning(
                "Advisory model timed out, using rules",
                extra={"timeout_seconds": self._timeout_seconds, "location": observation.location},
            )
            return classify(observation, beginner_mode)
        except AdvisoryPayloadError as e:
            logger.warning(
                "Advisory model reply rejected, using rules",
                extra={"error": str(e), "location": observation.location},
            )
            return classify(observation, beginner_mode)
        except Exception as e:
            # Transport and auth failures from any client implementation
            logger.warning(
                "Advisory model call failed, using rules",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return classify(observation, beginner_mode)

        logger.info(
            "Advisory generated by model",
            extra={"level": advisory.level.value, "location": observation.location},
        )
        return advisory
