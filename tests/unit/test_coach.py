"""
Unit tests for the ski coach service.

Uses fake model and speech clients; no network calls.
"""

import pytest

from skipro.core.coaching.coach import (
    CHAT_FALLBACK_REPLY,
    DEFAULT_RATING,
    AnalysisError,
    SkiCoach,
    extract_section,
    parse_rating,
)
from skipro.core.coaching.goals import get_goal
from skipro.core.coaching.models import CoachingSession, CoachingStep, Speaker, UploadedVideo
from tests.fakes import FailingModelClient, FakeModelClient, FakeSpeechClient, SlowModelClient


REPORT = """### 🧭 Coach's Overview
Confident skiing with room to grow.

### 🔍 Key Movement Analysis
- Stance: hips slightly back

### 📊 Score
7.5/10"""


def uploaded_session(keyframes=(b"\xff\xd8\xff1", b"\xff\xd8\xff2", b"\xff\xd8\xff3")) -> CoachingSession:
    session = CoachingSession()
    session.confirm_goal(get_goal("ski-adv-carving"), "Windy day")
    session.attach_video(
        UploadedVideo(filename="run.mp4", content_type="video/mp4", data=b"\x00" * 10),
        list(keyframes),
        max_size_bytes=1024,
    )
    return session


# ---------------------------------------------------------------------------
# Report parsing
# ---------------------------------------------------------------------------

class TestReportParsing:

    def test_extract_section(self):
        assert extract_section(REPORT, "Key Movement") == "- Stance: hips slightly back"

    def test_extract_missing_section(self):
        assert extract_section(REPORT, "Drill") == ""

    def test_rating_from_score_section(self):
        assert parse_rating(REPORT) == 7.5

    def test_rating_bare_number_in_score_section(self):
        assert parse_rating("### 📊 Score\n9") == 9.0

    def test_rating_is_last_number_in_score_section(self):
        assert parse_rating("### 📊 Score\nOn a 10-point scale: 7") == 7.0

    def test_rating_out_of_ten_preferred_over_bare_numbers(self):
        assert parse_rating("### 📊 Score\n8/10 after 3 runs") == 8.0

    def test_rating_anywhere_in_text(self):
        assert parse_rating("Overall I'd give this 6/10.") == 6.0

    def test_rating_defaults_when_missing(self):
        assert parse_rating("Great run!") == DEFAULT_RATING

    def test_rating_clamped(self):
        assert parse_rating("### Score\n0/10") == 1.0
        assert parse_rating("### Score\n42") == 10.0


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class TestRunAnalysis:

    @pytest.mark.asyncio
    async def test_successful_analysis(self):
        client = FakeModelClient(analysis=REPORT)
        speech = FakeSpeechClient(audio="QUJD")
        coach = SkiCoach(client, speech, speech_text_limit=20)
        session = uploaded_session()

        report = await coach.run_analysis(session)

        assert report.rating == 7.5
        assert session.step == CoachingStep.RESULT
        assert session.analysis == REPORT
        assert session.audio_base64 == "QUJD"
        assert speech.texts == [REPORT[:20]]

        call = client.image_calls[0]
        assert len(call["images"]) == 3
        assert "Ski - Carving" in call["user_prompt"]
        assert "Windy day" in call["user_prompt"]

    @pytest.mark.asyncio
    async def test_speech_failure_keeps_analysis(self):
        coach = SkiCoach(FakeModelClient(analysis=REPORT), FakeSpeechClient(fail=True))
        session = uploaded_session()

        await coach.run_analysis(session)

        assert session.step == CoachingStep.RESULT
        assert session.audio_base64 is None

    @pytest.mark.asyncio
    async def test_no_speech_client(self):
        session = uploaded_session()
        await SkiCoach(FakeModelClient(analysis=REPORT)).run_analysis(session)
        assert session.audio_base64 is None

    @pytest.mark.asyncio
    async def test_model_failure_returns_to_upload(self):
        session = uploaded_session()

        with pytest.raises(AnalysisError):
            await SkiCoach(FailingModelClient()).run_analysis(session)

        assert session.step == CoachingStep.UPLOAD
        assert session.has_video
        assert "connection reset" in session.last_error

    @pytest.mark.asyncio
    async def test_timeout_returns_to_upload(self):
        coach = SkiCoach(SlowModelClient(delay_seconds=5), analysis_timeout_seconds=0.05)
        session = uploaded_session()

        with pytest.raises(AnalysisError, match="too long"):
            await coach.run_analysis(session)

        assert session.step == CoachingStep.UPLOAD

    @pytest.mark.asyncio
    async def test_no_keyframes_is_an_analysis_error(self):
        session = uploaded_session(keyframes=())
        with pytest.raises(AnalysisError, match="frames"):
            await SkiCoach(FakeModelClient(analysis=REPORT)).run_analysis(session)
        assert session.step == CoachingStep.UPLOAD

    @pytest.mark.asyncio
    async def test_no_model_configured(self):
        session = uploaded_session()
        with pytest.raises(AnalysisError, match="not configured"):
            await SkiCoach(None).run_analysis(session)

    @pytest.mark.asyncio
    async def test_empty_report_is_an_error(self):
        session = uploaded_session()
        with pytest.raises(AnalysisError, match="empty"):
            await SkiCoach(FakeModelClient(analysis="  ")).run_analysis(session)


# ---------------------------------------------------------------------------
# Follow-up chat
# ---------------------------------------------------------------------------

class TestConversation:

    async def analyzed_in_chat(self) -> CoachingSession:
        session = uploaded_session()
        await SkiCoach(FakeModelClient(analysis=REPORT)).run_analysis(session)
        session.open_chat()
        return session

    @pytest.mark.asyncio
    async def test_reply_appended_with_history(self):
        client = FakeModelClient(chat_reply="Press your shins into the boots.")
        session = await self.analyzed_in_chat()
        coach = SkiCoach(client)

        await coach.continue_conversation(session, "How do I get forward?")
        reply = await coach.continue_conversation(session, "And on steeper runs?")

        assert reply.speaker == Speaker.COACH
        assert reply.text == "Press your shins into the boots."
        assert len(session.conversation) == 4

        second_call = client.chat_calls[1]
        assert [m["role"] for m in second_call["messages"]] == ["user", "assistant", "user"]
        assert REPORT in second_call["system_prompt"]

    @pytest.mark.asyncio
    async def test_failed_reply_uses_fallback(self):
        session = await self.analyzed_in_chat()

        reply = await SkiCoach(FailingModelClient()).continue_conversation(session, "Hello?")

        assert reply.text == CHAT_FALLBACK_REPLY
        assert [m.speaker for m in session.conversation] == [Speaker.USER, Speaker.COACH]

    @pytest.mark.asyncio
    async def test_chat_requires_analysis(self):
        with pytest.raises(ValueError):
            await SkiCoach(FakeModelClient()).continue_conversation(CoachingSession(), "Hi")
