"""
In-memory stand-ins for the external clients.

Each fake implements the same protocol as the real wrapper, so core
services and routes run unchanged against them.
"""

import asyncio
from typing import Any, Optional

from skipro.core.advisory.models import WeatherObservation
from skipro.core.weather.models import SkiResort
from skipro.infrastructure.video.processor import ExtractedFrame, FrameExtractionError


def make_observation(**overrides: Any) -> WeatherObservation:
    """A calm, ideal-temperature reading; override what the test is about."""
    fields: dict[str, Any] = {
        "location": "Test Resort",
        "resolved_address": "Test City",
        "temp": -10.0,
        "feelslike": -15.0,
        "tempmax": -5.0,
        "tempmin": -15.0,
        "humidity": 30.0,
        "windspeed": 10.0,
        "winddir": 0.0,
        "snow": 0.0,
        "snowdepth": 25.0,
        "visibility": 20.0,
        "uvindex": 3.0,
        "conditions": "Clear",
        "icon": "clear-day",
        "sunrise": "07:30",
        "sunset": "17:15",
    }
    fields.update(overrides)
    return WeatherObservation(**fields)


def make_resort(resort_id: str = "R1", name: str = "Test Snow Park", location: str = "116.5,40.2") -> SkiResort:
    return SkiResort(
        id=resort_id,
        name=name,
        address="1 Slope Road",
        location=location,
        rating=4.5,
        cityname="北京市",
        adname="延庆区",
    )


class FakeModelClient:
    """Returns canned replies and records what it was asked."""

    def __init__(self, reply: str = "", analysis: str = "", chat_reply: str = "Keep your hands forward.") -> None:
        self.reply = reply
        self.analysis = analysis
        self.chat_reply = chat_reply
        self.complete_calls: list[dict[str, Any]] = []
        self.image_calls: list[dict[str, Any]] = []
        self.chat_calls: list[dict[str, Any]] = []

    async def complete(self, prompt: str, system_prompt: str, temperature: Optional[float] = None) -> str:
        self.complete_calls.append({"prompt": prompt, "system_prompt": system_prompt, "temperature": temperature})
        return self.reply

    async def analyze_images(self, images: list[bytes], system_prompt: str, user_prompt: str) -> str:
        self.image_calls.append({"images": images, "system_prompt": system_prompt, "user_prompt": user_prompt})
        return self.analysis

    async def chat(self, messages: list[dict[str, str]], system_prompt: str) -> str:
        self.chat_calls.append({"messages": messages, "system_prompt": system_prompt})
        return self.chat_reply


class SlowModelClient:
    """Never answers within a reasonable timeout."""

    def __init__(self, delay_seconds: float = 5.0) -> None:
        self.delay_seconds = delay_seconds

    async def complete(self, prompt: str, system_prompt: str, temperature: Optional[float] = None) -> str:
        await asyncio.sleep(self.delay_seconds)
        return "{}"

    async def analyze_images(self, images: list[bytes], system_prompt: str, user_prompt: str) -> str:
        await asyncio.sleep(self.delay_seconds)
        return ""

    async def chat(self, messages: list[dict[str, str]], system_prompt: str) -> str:
        await asyncio.sleep(self.delay_seconds)
        return ""


class FailingModelClient:
    """Every call fails the way a transport error would."""

    async def complete(self, prompt: str, system_prompt: str, temperature: Optional[float] = None) -> str:
        raise RuntimeError("connection reset")

    async def analyze_images(self, images: list[bytes], system_prompt: str, user_prompt: str) -> str:
        raise RuntimeError("connection reset")

    async def chat(self, messages: list[dict[str, str]], system_prompt: str) -> str:
        raise RuntimeError("connection reset")


class FakeSpeechClient:
    def __init__(self, audio: str = "UklGRgAAAABXQVZF", fail: bool = False) -> None:
        self.audio = audio
        self.fail = fail
        self.texts: list[str] = []

    async def synthesize(self, text: str) -> str:
        self.texts.append(text)
        if self.fail:
            raise RuntimeError("speech quota exceeded")
        return self.audio


class FakeWeatherProvider:
    """
    Serves a fixed reading and resort list.

    Pass an exception instance for either to make that call raise.
    """

    def __init__(
        self,
        weather: Any = None,
        resorts: Any = None,
    ) -> None:
        self.weather = weather if weather is not None else {}
        self.resorts = resorts if resorts is not None else []
        self.weather_queries: list[str] = []
        self.resort_queries: list[tuple[str, str]] = []

    async def fetch_weather(self, location: str) -> dict[str, Any]:
        self.weather_queries.append(location)
        if isinstance(self.weather, Exception):
            raise self.weather
        return self.weather

    async def search_resorts(self, city: str, keywords: str) -> list[SkiResort]:
        self.resort_queries.append((city, keywords))
        if isinstance(self.resorts, Exception):
            raise self.resorts
        return self.resorts


class FakeVideoProcessor:
    """Returns fixed keyframes, or fails extraction."""

    def __init__(self, frame_count: int = 3, fail: bool = False) -> None:
        self.frame_count = frame_count
        self.fail = fail

    async def extract_keyframes(self, video_data: bytes, strategy: Any = None, suffix: str = ".mp4") -> list[Any]:
        if self.fail:
            raise FrameExtractionError("No frames could be extracted from the video")
        return [
            ExtractedFrame(timestamp_seconds=float(i), frame_number=i, data=b"\xff\xd8\xff" + bytes([i]))
            for i in range(self.frame_count)
        ]
