"""
Qveris tool-execution API client.

Qveris fronts the third-party providers we need:
- Visual Crossing timeline (`visualcrossing.timeline.retrieve.v1`) for weather
- Amap place search (`amap_webservice.place.text.list.v3`) for ski resorts

This wrapper implements the WeatherDataProvider protocol from
core.weather.gateway. It translates provider payloads into the flat
reading mapping and SkiResort records the gateway expects; it does not
apply defaults, which is the gateway's job.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

import httpx

from ...core.weather.models import SkiResort


logger = logging.getLogger(__name__)

WEATHER_TOOL_ID = "visualcrossing.timeline.retrieve.v1"
PLACE_SEARCH_TOOL_ID = "amap_webservice.place.text.list.v3"

MAX_RESPONSE_SIZE = 20480
RESORT_MARKER = "滑雪"
DEFAULT_RESORT_RATING = 4.0

# Keys shared by the hourly and daily entries of a timeline
READING_KEYS = (
    "temp", "feelslike", "humidity", "windspeed", "winddir", "snow",
    "snowdepth", "visibility", "uvindex", "conditions", "icon",
)


class QverisClientError(Exception):
    """Raised when a Qveris call fails or returns an error result."""
    pass


@dataclass
class QverisConfig:
    """Connection settings for the Qveris API."""
    api_key: str
    base_url: str = "https://qveris.ai/api/v1"
    timeout_seconds: float = 10.0
    search_id: str = "skipro-weather"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")


# ---------------------------------------------------------------------------
# Payload translation
# ---------------------------------------------------------------------------

def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _hour_of(entry: dict[str, Any]) -> Optional[int]:
    """Hour from a timeline entry's "HH:MM:SS" datetime."""
    raw = str(entry.get("datetime", ""))
    try:
        return int(raw.split(":")[0])
    except ValueError:
        return None


def flatten_timeline(result: Any, location: str, current_hour: int) -> dict[str, Any]:
    """
    Reduce a Visual Crossing timeline to one flat reading.

    Uses today's entry for the current hour when present, otherwise
    the day aggregate. Daily-only fields (min/max, sunrise/sunset)
    always come from the day.
    """
    if not isinstance(result, dict):
        raise QverisClientError("Weather result is not an object")

    data = result.get("data") or result
    days = data.get("days") or []
    today = days[0] if days and isinstance(days[0], dict) else {}

    hour_data = today
    for entry in today.get("hours") or []:
        if isinstance(entry, dict) and _hour_of(entry) == current_hour:
            hour_data = entry
            break

    reading: dict[str, Any] = {
        "location": data.get("address") or location,
        "resolvedAddress": data.get("resolvedAddress") or location,
        "tempmax": today.get("tempmax"),
        "tempmin": today.get("tempmin"),
        "sunrise": today.get("sunrise"),
        "sunset": today.get("sunset"),
    }
    for key in READING_KEYS:
        reading[key] = _first_present(hour_data.get(key), today.get(key))

    return reading


def poi_to_resort(poi: dict[str, Any], city: str) -> SkiResort:
    """Map an Amap POI to a SkiResort."""
    biz_ext = poi.get("biz_ext") or {}
    try:
        rating = float(biz_ext.get("rating")) if isinstance(biz_ext, dict) else DEFAULT_RESORT_RATING
    except (TypeError, ValueError):
        rating = DEFAULT_RESORT_RATING

    tel = poi.get("tel")
    if isinstance(tel, list):
        tel = tel[0] if tel else None

    photos = poi.get("photos") or []
    photo_url = photos[0].get("url") if photos and isinstance(photos[0], dict) else None

    return SkiResort(
        id=str(poi.get("id", "")),
        name=str(poi.get("name", "")),
        address=poi.get("address") or "",
        location=poi.get("location") or "",
        rating=rating or DEFAULT_RESORT_RATING,
        tel=tel or None,
        cityname=poi.get("cityname") or city,
        adname=poi.get("adname") or "",
        photo_url=photo_url,
    )


def _is_ski_venue(poi: dict[str, Any]) -> bool:
    return RESORT_MARKER in str(poi.get("type") or "") or RESORT_MARKER in str(poi.get("name") or "")


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class QverisClient:
    """
    Weather and resort provider backed by Qveris.

    Each call opens its own short-lived httpx client so the provider can
    be shared across event loops. Tests pass an httpx.MockTransport.
    """

    def __init__(
        self,
        config: QverisConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._transport = transport
        self._clock = clock

    async def execute_tool(self, tool_id: str, parameters: dict[str, Any]) -> Any:
        """Run one Qveris tool and return its `result` payload."""
        body = {
            "search_id": self._config.search_id,
            "session_id": f"skipro-{int(time.time() * 1000)}",
            "parameters": parameters,
            "max_response_size": MAX_RESPONSE_SIZE,
        }
        headers = {"Authorization": f"Bearer {self._config.api_key}"}

        try:
            async with httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/tools/execute",
                    params={"tool_id": tool_id},
                    headers=headers,
                    json=body,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise QverisClientError(f"Qveris API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise QverisClientError(f"Qveris request failed: {e}") from e
        except ValueError as e:
            raise QverisClientError("Qveris returned invalid JSON") from e

        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("error_message") if isinstance(data, dict) else None
            raise QverisClientError(message or "Qveris API execution failed")

        logger.debug("Qveris tool executed", extra={"tool_id": tool_id})
        return data.get("result")

    async def fetch_weather(self, location: str) -> dict[str, Any]:
        result = await self.execute_tool(
            WEATHER_TOOL_ID,
            {"location": location, "unitGroup": "metric"},
        )
        return flatten_timeline(result, location, self._clock().hour)

    async def search_resorts(self, city: str, keywords: str) -> list[SkiResort]:
        result = await self.execute_tool(
            PLACE_SEARCH_TOOL_ID,
            {"keywords": keywords, "city": city, "extensions": "all", "offset": 20},
        )
        data = (result.get("data") or result) if isinstance(result, dict) else {}
        pois = data.get("pois") or []

        resorts = [
            poi_to_resort(poi, city)
            for poi in pois
            if isinstance(poi, dict) and _is_ski_venue(poi)
        ]
        logger.info("Resort search complete", extra={"city": city, "count": len(resorts)})
        return resorts


def create_qveris_client(
    api_key: Optional[str],
    base_url: str = "https://qveris.ai/api/v1",
    timeout_seconds: float = 10.0,
) -> Optional[QverisClient]:
    """Build a configured client, or None when no key is set."""
    if not api_key:
        logger.warning("QVERIS_API_KEY not set, weather will be synthetic")
        return None
    return QverisClient(QverisConfig(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds))
