"""
Weather gateway: provider readings in, WeatherObservation out.

Responsibilities:
1. Fetch a reading through the injected provider with a bounded timeout
2. Default every missing or non-finite field before the classifier sees it
3. Substitute a synthetic, range-bounded reading when the provider fails
4. Serve the resort directory, falling back to the built-in list

The synthetic reading carries `is_synthetic=True` so diagnostics can
tell it apart. The advisory path treats it like any other reading.
"""

import asyncio
import logging
import math
import random
from typing import Any, Optional, Protocol

from ..advisory.models import WeatherObservation
from .models import SkiResort
from .resorts import DEFAULT_SKI_RESORTS


logger = logging.getLogger(__name__)

DEFAULT_WEATHER_TIMEOUT_SECONDS = 15.0


class WeatherUnavailableError(Exception):
    """Raised when no reading is available and synthetic data is disabled."""
    pass


class WeatherPayloadError(ValueError):
    """Raised when the provider returns something that is not a reading."""
    pass


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class WeatherDataProvider(Protocol):
    """
    Source of raw weather readings and resort listings.

    `fetch_weather` returns a flat mapping keyed like WeatherObservation
    fields; any key may be missing. Both methods raise on transport
    failure.
    """

    async def fetch_weather(self, location: str) -> dict[str, Any]:
        ...

    async def search_resorts(self, city: str, keywords: str) -> list[SkiResort]:
        ...


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

NUMERIC_DEFAULTS: dict[str, float] = {
    "temp": -10.0,
    "feelslike": -15.0,
    "tempmax": -5.0,
    "tempmin": -15.0,
    "humidity": 30.0,
    "windspeed": 15.0,
    "winddir": 0.0,
    "snow": 0.0,
    "snowdepth": 25.0,
    "visibility": 20.0,
    "uvindex": 3.0,
}

TEXT_DEFAULTS: dict[str, str] = {
    "conditions": "Clear",
    "icon": "clear-day",
    "sunrise": "07:30",
    "sunset": "17:15",
}

SYNTHETIC_CONDITIONS = ("Clear", "Partly cloudy", "Overcast", "Light snow", "Moderate snow")
SYNTHETIC_ICONS = ("clear-day", "partly-cloudy-day", "cloudy", "snow")


def _number(value: Any, default: float) -> float:
    """Coerce to a finite float, or return the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def normalize_observation(
    data: dict[str, Any],
    name: str,
    fallback_address: str = "",
) -> WeatherObservation:
    """
    Build an observation from a provider mapping, defaulting gaps.

    The display name is ours (resort name or the user's query), not the
    provider's echo of the coordinates.
    """
    if not isinstance(data, dict):
        raise WeatherPayloadError(f"Expected a mapping, got {type(data).__name__}")

    numbers = {key: _number(data.get(key), default) for key, default in NUMERIC_DEFAULTS.items()}
    texts = {key: _text(data.get(key), default) for key, default in TEXT_DEFAULTS.items()}

    return WeatherObservation(
        location=name,
        resolved_address=_text(data.get("resolvedAddress"), fallback_address or name),
        is_synthetic=False,
        **numbers,
        **texts,
    )


def synthetic_observation(
    name: str,
    address: str,
    rng: random.Random,
) -> WeatherObservation:
    """A plausible cold-climate reading, bounded to realistic ranges."""
    snow = float(round(rng.random() * 5)) if rng.random() > 0.7 else 0.0
    return WeatherObservation(
        location=name,
        resolved_address=address or name,
        temp=float(round(-11 + rng.random() * 6)),
        feelslike=float(round(-19 + rng.random() * 8)),
        tempmax=float(round(-5 + rng.random() * 4)),
        tempmin=float(round(-15 + rng.random() * 4)),
        humidity=float(round(25 + rng.random() * 20)),
        windspeed=float(round(10 + rng.random() * 20)),
        winddir=float(round(rng.random() * 360)),
        snow=snow,
        snowdepth=float(round(20 + rng.random() * 30)),
        visibility=float(round(15 + rng.random() * 10)),
        uvindex=float(round(2 + rng.random() * 3)),
        conditions=rng.choice(SYNTHETIC_CONDITIONS),
        icon=rng.choice(SYNTHETIC_ICONS),
        sunrise=TEXT_DEFAULTS["sunrise"],
        sunset=TEXT_DEFAULTS["sunset"],
        is_synthetic=True,
    )


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class WeatherGateway:
    """
    Fetches observations and resort listings with safe fallbacks.

    The only state kept between calls is the last resort list, so that
    a resort picked from the listing can be resolved by id afterwards.
    """

    def __init__(
        self,
        provider: Optional[WeatherDataProvider],
        timeout_seconds: float = DEFAULT_WEATHER_TIMEOUT_SECONDS,
        synthetic_fallback: bool = True,
        rng: Optional[random.Random] = None,
        default_city: str = "北京",
        default_keywords: str = "滑雪场",
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._provider = provider
        self._timeout_seconds = timeout_seconds
        self._synthetic_fallback = synthetic_fallback
        self._rng = rng or random.Random()
        self._default_city = default_city
        self._default_keywords = default_keywords
        self._resorts: list[SkiResort] = list(DEFAULT_SKI_RESORTS)

    async def fetch_observation(
        self,
        location: str,
        name: Optional[str] = None,
        fallback_address: str = "",
    ) -> WeatherObservation:
        """
        Reading for a free-form location (coordinates or place name).

        Raises WeatherUnavailableError only when synthetic fallback is
        disabled; otherwise always returns an observation.
        """
        display_name = name or location

        try:
            if self._provider is None:
                raise WeatherUnavailableError("No weather provider configured")
            data = await asyncio.wait_for(
                self._provider.fetch_weather(location),
                timeout=self._timeout_seconds,
            )
            observation = normalize_observation(data, display_name, fallback_address)
        except Exception as e:
            logger.warning(
                "Weather fetch failed",
                extra={
                    "location": location,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "synthetic_fallback": self._synthetic_fallback,
                },
            )
            if not self._synthetic_fallback:
                raise WeatherUnavailableError(
                    f"Weather for {display_name} is unavailable. Please try again."
                ) from e
            return synthetic_observation(display_name, fallback_address, self._rng)

        logger.debug("Weather fetched", extra={"location": location})
        return observation

    async def fetch_for_resort(self, resort: SkiResort) -> WeatherObservation:
        return await self.fetch_observation(
            resort.weather_query,
            name=resort.name,
            fallback_address=resort.district_address,
        )

    async def fetch_resorts(
        self,
        city: Optional[str] = None,
        keywords: Optional[str] = None,
    ) -> list[SkiResort]:
        """Resort listing; the built-in list when the directory fails or is empty."""
        city = city or self._default_city
        keywords = keywords or self._default_keywords

        if self._provider is None:
            return list(DEFAULT_SKI_RESORTS)

        try:
            resorts = await asyncio.wait_for(
                self._provider.search_resorts(city, keywords),
                timeout=self._timeout_seconds,
            )
        except Exception as e:
            logger.warning(
                "Resort lookup failed, using built-in list",
                extra={"city": city, "error": str(e), "error_type": type(e).__name__},
            )
            return list(DEFAULT_SKI_RESORTS)

        if not resorts:
            logger.info("Resort lookup returned nothing, using built-in list", extra={"city": city})
            return list(DEFAULT_SKI_RESORTS)

        self._resorts = list(resorts)
        return list(resorts)

    def get_resort(self, resort_id: str) -> Optional[SkiResort]:
        """Find a resort in the last listing, then in the built-in list."""
        for resort in (*self._resorts, *DEFAULT_SKI_RESORTS):
            if resort.id == resort_id:
                return resort
        return None
