"""
Unit tests for infrastructure pieces that don't need a network:
session storage, message shaping for Claude, and the mock video
processor.
"""

from datetime import datetime

import pytest

from skipro.core.coaching.frames import KeyframeStrategy
from skipro.core.coaching.models import CoachingSession
from skipro.infrastructure.anthropic.client import (
    AnthropicConfig,
    AnthropicVisionClient,
    create_anthropic_client,
)
from skipro.infrastructure.gemini.client import create_speech_client
from skipro.infrastructure.memory.sessions import InMemorySessionRepository, SessionNotFoundError
from skipro.infrastructure.video.processor import PLACEHOLDER_JPEG, MockVideoProcessor, create_video_processor


# ---------------------------------------------------------------------------
# Session storage
# ---------------------------------------------------------------------------

class TestInMemorySessionRepository:

    def test_create_and_get(self):
        repository = InMemorySessionRepository()
        session = repository.create_session()
        assert repository.get_session(session.id) is session

    def test_missing_session(self):
        repository = InMemorySessionRepository()
        with pytest.raises(SessionNotFoundError):
            repository.get_session(CoachingSession().id)
        assert repository.find_session(CoachingSession().id) is None

    def test_delete(self):
        repository = InMemorySessionRepository()
        session = repository.create_session()
        repository.delete_session(session.id)
        assert len(repository) == 0
        with pytest.raises(SessionNotFoundError):
            repository.delete_session(session.id)

    def test_oldest_evicted_when_full(self):
        repository = InMemorySessionRepository(max_sessions=2)
        first = repository.create_session()
        second = repository.create_session()
        first.updated_at = datetime(2026, 1, 2)
        second.updated_at = datetime(2026, 1, 1)

        third = repository.create_session()

        assert len(repository) == 2
        assert repository.find_session(second.id) is None
        assert repository.find_session(first.id) is first
        assert repository.find_session(third.id) is third

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            InMemorySessionRepository(max_sessions=0)


# ---------------------------------------------------------------------------
# Claude message shaping
# ---------------------------------------------------------------------------

class TestAnthropicMessages:

    @pytest.fixture
    def client(self):
        return AnthropicVisionClient(AnthropicConfig(api_key="sk-test"))

    def test_consecutive_roles_merged(self, client):
        messages = client._validate_messages([
            {"role": "user", "content": "First"},
            {"role": "user", "content": "Second"},
            {"role": "assistant", "content": ""},
            {"role": "assistant", "content": "Reply"},
        ])
        assert messages == [
            {"role": "user", "content": "First\n\nSecond"},
            {"role": "assistant", "content": "Reply"},
        ]

    def test_must_start_with_user(self, client):
        with pytest.raises(ValueError, match="start with a user"):
            client._validate_messages([{"role": "assistant", "content": "Hi"}])

    def test_unknown_role_rejected(self, client):
        with pytest.raises(ValueError, match="Invalid message role"):
            client._validate_messages([{"role": "system", "content": "Hi"}])

    def test_image_type_detection(self, client):
        assert client._detect_image_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
        assert client._detect_image_type(b"\x89PNG\r\n\x1a\nrest") == "image/png"
        assert client._detect_image_type(b"unknown") == "image/jpeg"

    def test_image_content_ends_with_prompt(self, client):
        content = client._build_image_content([PLACEHOLDER_JPEG, PLACEHOLDER_JPEG], "Analyze")
        assert [block["type"] for block in content] == ["image", "image", "text"]
        assert content[0]["source"]["media_type"] == "image/jpeg"

    def test_config_validation(self):
        with pytest.raises(ValueError):
            AnthropicConfig(api_key="")
        with pytest.raises(ValueError):
            AnthropicConfig(api_key="sk-test", temperature=1.5)


class TestClientFactories:

    def test_no_keys_mean_no_clients(self):
        assert create_anthropic_client("") is None
        assert create_speech_client("") is None


# ---------------------------------------------------------------------------
# Video processing
# ---------------------------------------------------------------------------

class TestMockVideoProcessor:

    @pytest.mark.asyncio
    async def test_keyframes_at_strategy_timestamps(self):
        frames = await MockVideoProcessor().extract_keyframes(b"video", KeyframeStrategy())

        assert [f.timestamp_seconds for f in frames] == pytest.approx([2.0, 5.0, 8.0])
        assert all(f.data == PLACEHOLDER_JPEG for f in frames)

    @pytest.mark.asyncio
    async def test_frames_numbered_in_order(self):
        frames = await MockVideoProcessor().extract_keyframes(b"video", KeyframeStrategy())
        assert [f.frame_number for f in frames] == [0, 1, 2]

    def test_factory_mock_mode(self):
        assert isinstance(create_video_processor(mock_mode=True), MockVideoProcessor)
