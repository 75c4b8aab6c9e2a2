"""
Unit tests for the advisory orchestrator.

The service must always return an Advisory: the model's when it is
well-formed and on time, the classifier's otherwise.
"""

import json
import time

import pytest

from skipro.core.advisory.classifier import classify
from skipro.core.advisory.models import AdvisoryLevel
from skipro.core.advisory.orchestrator import (
    AdvisoryPayloadError,
    AdvisoryService,
    build_advisory_prompt,
    parse_advisory_payload,
)
from tests.fakes import FailingModelClient, FakeModelClient, SlowModelClient, make_observation


def model_reply(**overrides) -> str:
    payload = {
        "level": "good",
        "title": "Solid day on the hill.",
        "suggestions": ["Wax your skis", "Start on blue runs"],
        "beginnerTips": ["Take a lesson", "Rest often"],
    }
    payload.update(overrides)
    return json.dumps(payload)


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------

class TestParseAdvisoryPayload:

    def test_valid_payload(self):
        advisory = parse_advisory_payload(model_reply(), beginner_mode=True)

        assert advisory.level == AdvisoryLevel.GOOD
        assert advisory.title == "Solid day on the hill."
        assert advisory.suggestions == ("Wax your skis", "Start on blue runs")
        assert advisory.beginner_tips == ("Take a lesson", "Rest often")

    def test_code_fences_are_stripped(self):
        raw = "```json\n" + model_reply() + "\n```"
        advisory = parse_advisory_payload(raw, beginner_mode=True)
        assert advisory.level == AdvisoryLevel.GOOD

    def test_tips_dropped_when_mode_off(self):
        advisory = parse_advisory_payload(model_reply(), beginner_mode=False)
        assert advisory.beginner_tips is None

    def test_tips_required_in_beginner_mode(self):
        with pytest.raises(AdvisoryPayloadError, match="beginnerTips"):
            parse_advisory_payload(model_reply(beginnerTips=None), beginner_mode=True)

    def test_missing_tips_fine_when_mode_off(self):
        raw = json.dumps({"level": "caution", "title": "Windy.", "suggestions": []})
        advisory = parse_advisory_payload(raw, beginner_mode=False)
        assert advisory.level == AdvisoryLevel.CAUTION
        assert advisory.suggestions == ()

    @pytest.mark.parametrize("raw", [
        "",
        "not json at all",
        "[1, 2, 3]",
        json.dumps({"level": "superb", "title": "x", "suggestions": []}),
        json.dumps({"level": "good", "title": "", "suggestions": []}),
        json.dumps({"level": "good", "title": "x"}),
        json.dumps({"level": "good", "title": "x", "suggestions": "wear a hat"}),
    ])
    def test_malformed_replies_rejected(self, raw):
        with pytest.raises(AdvisoryPayloadError):
            parse_advisory_payload(raw, beginner_mode=False)

    def test_unknown_keys_ignored(self):
        advisory = parse_advisory_payload(model_reply(confidence=0.9), beginner_mode=False)
        assert advisory.level == AdvisoryLevel.GOOD


class TestBuildAdvisoryPrompt:

    def test_prompt_includes_reading(self):
        prompt = build_advisory_prompt(make_observation(temp=-7, windspeed=22), beginner_mode=False)
        assert "-7" in prompt
        assert "22" in prompt
        assert '"beginnerTips": null' in prompt

    def test_beginner_prompt_asks_for_tips(self):
        prompt = build_advisory_prompt(make_observation(), beginner_mode=True)
        assert "a beginner" in prompt
        assert "beginner tip 1" in prompt


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class TestAdvisoryService:

    @pytest.mark.asyncio
    async def test_no_client_uses_rules(self):
        service = AdvisoryService(model_client=None)
        obs = make_observation(windspeed=45)

        advisory = await service.get_advisory(obs, beginner_mode=True)

        assert not service.uses_model
        assert advisory == classify(obs, True)

    @pytest.mark.asyncio
    async def test_model_advisory_returned_when_valid(self):
        client = FakeModelClient(reply=model_reply(level="excellent"))
        service = AdvisoryService(model_client=client, temperature=0.3)

        advisory = await service.get_advisory(make_observation(), beginner_mode=True)

        assert advisory.level == AdvisoryLevel.EXCELLENT
        assert advisory.beginner_tips == ("Take a lesson", "Rest often")
        assert client.complete_calls[0]["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_timeout_falls_back_within_budget(self):
        service = AdvisoryService(model_client=SlowModelClient(delay_seconds=5), timeout_seconds=0.05)
        obs = make_observation(temp=-25)

        started = time.monotonic()
        advisory = await service.get_advisory(obs, beginner_mode=True)
        elapsed = time.monotonic() - started

        assert advisory == classify(obs, True)
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_malformed_reply_falls_back(self):
        service = AdvisoryService(model_client=FakeModelClient(reply="Sunny, go skiing!"))
        obs = make_observation(visibility=2)

        advisory = await service.get_advisory(obs, beginner_mode=False)

        assert advisory == classify(obs, False)

    @pytest.mark.asyncio
    async def test_transport_error_falls_back(self):
        service = AdvisoryService(model_client=FailingModelClient())
        obs = make_observation()

        advisory = await service.get_advisory(obs, beginner_mode=False)

        assert advisory == classify(obs, False)

    @pytest.mark.asyncio
    async def test_beginner_reply_without_tips_falls_back(self):
        client = FakeModelClient(reply=model_reply(beginnerTips=None))
        service = AdvisoryService(model_client=client)
        obs = make_observation()

        advisory = await service.get_advisory(obs, beginner_mode=True)

        assert advisory == classify(obs, True)
        assert advisory.has_beginner_tips

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            AdvisoryService(timeout_seconds=0)
