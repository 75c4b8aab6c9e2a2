"""
Shared fixtures for API tests.

Every external client is swapped for a fake through
app.dependency_overrides, so the routes run end to end in-process.
"""

import random
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from skipro.api.dependencies import (
    get_model_client,
    get_session_repository,
    get_speech_client,
    get_video_processor,
    get_weather_gateway,
)
from skipro.config.settings import Settings, get_settings
from skipro.core.weather.gateway import WeatherGateway
from skipro.infrastructure.memory.sessions import InMemorySessionRepository
from skipro.main import create_app
from tests.fakes import FakeModelClient, FakeSpeechClient, FakeVideoProcessor, FakeWeatherProvider


API_KEY = "test-key"

REPORT = """### 🧭 Coach's Overview
Strong edges, upper body a bit stiff.

### 📊 Score
8/10"""


@pytest.fixture
def fakes():
    """The fakes behind the app. Tests tweak them before making requests."""
    ns = SimpleNamespace(
        settings=Settings(
            _env_file=None,
            api_keys=API_KEY,
            anthropic_api_key="",
            gemini_api_key="",
            qveris_api_key="",
            max_upload_size_mb=1,
        ),
        model=FakeModelClient(reply="not json", analysis=REPORT, chat_reply="Relax your shoulders."),
        speech=FakeSpeechClient(audio="QUJD"),
        video=FakeVideoProcessor(),
        provider=FakeWeatherProvider(weather={"temp": -8, "windspeed": 12, "winddir": 225, "icon": "snow"}),
        repository=InMemorySessionRepository(),
    )
    ns.gateway = WeatherGateway(ns.provider, rng=random.Random(11))
    return ns


@pytest.fixture
def client(fakes):
    app = create_app()

    app.dependency_overrides[get_settings] = lambda: fakes.settings
    app.dependency_overrides[get_model_client] = lambda: fakes.model
    app.dependency_overrides[get_speech_client] = lambda: fakes.speech
    app.dependency_overrides[get_video_processor] = lambda: fakes.video
    app.dependency_overrides[get_session_repository] = lambda: fakes.repository
    app.dependency_overrides[get_weather_gateway] = lambda: fakes.gateway

    with TestClient(app, headers={"X-API-Key": API_KEY}) as test_client:
        yield test_client
