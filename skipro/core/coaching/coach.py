"""
Ski coaching logic and prompt management.

This module is the "coaching brain": it turns an uploaded clip into a
written report, a rating and optional spoken feedback, and keeps the
follow-up conversation going. It drives the session's state machine
but knows nothing about HTTP or which AI vendor answers.

The prompts are here, not in config, because they're core business
logic. Changing them changes what the product does.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from .models import ChatMessage, CoachingSession, Speaker


logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_TIMEOUT_SECONDS = 120.0
DEFAULT_SPEECH_TEXT_LIMIT = 300
DEFAULT_RATING = 8.5

CHAT_FALLBACK_REPLY = "Sorry, your coach lost focus for a second. Could you say that again?"


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class VisionModelClient(Protocol):
    """
    Interface for vision-capable LLM clients.

    The coach doesn't care which model answers, only that it can look
    at images and hold a conversation.
    """

    async def analyze_images(
        self,
        images: list[bytes],
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Analyze images and return text response."""
        ...

    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str,
    ) -> str:
        """Continue a conversation."""
        ...


class SpeechClient(Protocol):
    """Text-to-speech. Returns base64-encoded audio."""

    async def synthesize(self, text: str) -> str:
        ...


class AnalysisError(Exception):
    """Raised when a clip could not be analyzed. The session is back in UPLOAD."""
    pass


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """You are "SkiPro AI", a top professional ski and snowboard coach.

Keep your replies extremely concise and direct, easy to read on a phone.

## Format
1. Use standard Markdown headings (### Heading).
2. No more than 3 lines of text per section.
3. Use emoji to help readability.

## Structure
### 🧭 Coach's Overview
[One sentence on the overall state]

### 🔍 Key Movement Analysis
- [Point 1]: [short description of body position]
- [Point 2]: [short description of body position]

### 💡 Core Improvements
1. [Suggestion 1]
2. [Suggestion 2]

### ⛷️ Recommended Drill
[One specific drill and its purpose]

### 📊 Score
[Score out of 10, written as N/10]"""


ANALYSIS_USER_PROMPT_TEMPLATE = """I'm sending {frame_count} keyframes taken from my {media_type} video.

Training goal: {goal_label}
Key points for this goal: {key_points}
Notes from me: {user_context}

Please analyze my technique for this goal and give me coaching feedback."""


FOLLOWUP_CONTEXT_TEMPLATE = """Your earlier report on this rider's video:

{analysis}

The rider is now asking follow-up questions. Keep coaching them based on what you observed."""


# ---------------------------------------------------------------------------
# Report parsing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisReport:
    """The coach's written report. Rendered as-is, not parsed structurally."""
    text: str
    rating: float


def extract_section(text: str, heading: str) -> str:
    """Content under the first Markdown heading containing `heading`."""
    captured: list[str] = []
    capturing = False

    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#"):
            if capturing:
                break
            if heading.lower() in stripped.lower():
                capturing = True
            continue
        if capturing:
            captured.append(line)

    return "\n".join(captured).strip()


_OUT_OF_TEN = re.compile(r"(\d+(?:\.\d+)?)\s*/\s*10\b")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_rating(report: str, default: float = DEFAULT_RATING) -> float:
    """
    Pull the 1-10 score out of the report.

    Prefers an "N/10" in the Score section, then the last bare number
    there ("On a 10-point scale: 7" is a 7), then any "N/10" in the
    text. Falls back to the default when the model didn't give a score.
    """
    section = extract_section(report, "Score")
    match = _OUT_OF_TEN.search(section)
    if match:
        value = float(match.group(1))
    else:
        numbers = _NUMBER.findall(section)
        if numbers:
            value = float(numbers[-1])
        else:
            match = _OUT_OF_TEN.search(report)
            if not match:
                return default
            value = float(match.group(1))
    return min(max(value, 1.0), 10.0)


# ---------------------------------------------------------------------------
# Coach Service
# ---------------------------------------------------------------------------

class SkiCoach:
    """
    The coaching service that orchestrates analysis and conversation.

    Holds only its dependencies. Session state lives in CoachingSession.
    """

    def __init__(
        self,
        vision_client: Optional[VisionModelClient],
        speech_client: Optional[SpeechClient] = None,
        analysis_timeout_seconds: float = DEFAULT_ANALYSIS_TIMEOUT_SECONDS,
        speech_text_limit: int = DEFAULT_SPEECH_TEXT_LIMIT,
    ) -> None:
        self._vision_client = vision_client
        self._speech_client = speech_client
        self._analysis_timeout_seconds = analysis_timeout_seconds
        self._speech_text_limit = speech_text_limit

    async def run_analysis(self, session: CoachingSession) -> AnalysisReport:
        """
        Analyze the session's clip: UPLOAD -> ANALYZING -> RESULT.

        On failure the session goes back to UPLOAD with the error
        recorded, and AnalysisError is raised for the caller to surface.
        """
        session.begin_analysis()

        try:
            report = await self._analyze(session)
        except AnalysisError as e:
            session.fail_analysis(str(e))
            raise

        audio = await self.synthesize_feedback_audio(report.text)
        session.complete_analysis(report.text, report.rating, audio)

        logger.info(
            "Analysis complete",
            extra={
                "session_id": str(session.id),
                "rating": report.rating,
                "has_audio": audio is not None,
            },
        )
        return report

    async def _analyze(self, session: CoachingSession) -> AnalysisReport:
        if self._vision_client is None:
            raise AnalysisError("Video analysis is not configured")
        if not session.keyframes:
            raise AnalysisError("Could not read any frames from the video. Try another clip.")

        goal = session.goal
        video = session.video
        user_prompt = ANALYSIS_USER_PROMPT_TEMPLATE.format(
            frame_count=len(session.keyframes),
            media_type=video.content_type if video else "video",
            goal_label=goal.label if goal else "General technique",
            key_points=", ".join(goal.key_points) if goal else "None",
            user_context=session.user_context or "None provided",
        )

        try:
            text = await asyncio.wait_for(
                self._vision_client.analyze_images(
                    images=session.keyframes,
                    system_prompt=SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                ),
                timeout=self._analysis_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "Analysis timed out",
                extra={"session_id": str(session.id), "timeout_seconds": self._analysis_timeout_seconds},
            )
            raise AnalysisError("Analysis took too long. Please try again.") from e
        except Exception as e:
            logger.error(
                "Analysis failed",
                extra={"session_id": str(session.id), "error": str(e)},
            )
            raise AnalysisError(f"Analysis failed: {e}") from e

        if not text.strip():
            raise AnalysisError("The coach returned an empty report. Please try again.")

        return AnalysisReport(text=text, rating=parse_rating(text))

    async def synthesize_feedback_audio(self, text: str) -> Optional[str]:
        """
        Spoken version of the start of the report.

        Failure only drops the audio, never the analysis.
        """
        if self._speech_client is None or not text.strip():
            return None

        try:
            return await self._speech_client.synthesize(text[: self._speech_text_limit])
        except Exception as e:
            logger.warning("Speech synthesis failed, skipping audio", extra={"error": str(e)})
            return None

    async def continue_conversation(
        self,
        session: CoachingSession,
        user_message: str,
    ) -> ChatMessage:
        """
        Handle a follow-up question and return the coach's reply.

        Both messages are appended to the transcript. If the model call
        fails the coach answers with a canned apology instead.
        """
        if not session.is_analyzed:
            raise ValueError("Cannot continue conversation without initial analysis")

        messages = self._build_message_history(session, user_message)
        session.add_message(Speaker.USER, user_message)

        system_prompt = SYSTEM_PROMPT + "\n\n" + FOLLOWUP_CONTEXT_TEMPLATE.format(
            analysis=session.analysis or ""
        )

        try:
            if self._vision_client is None:
                raise RuntimeError("Chat model is not configured")
            reply = await self._vision_client.chat(messages=messages, system_prompt=system_prompt)
        except Exception as e:
            logger.warning(
                "Chat reply failed",
                extra={"session_id": str(session.id), "error": str(e)},
            )
            reply = CHAT_FALLBACK_REPLY

        return session.add_message(Speaker.COACH, reply.strip() or CHAT_FALLBACK_REPLY)

    def _build_message_history(
        self,
        session: CoachingSession,
        new_message: str,
    ) -> list[dict[str, str]]:
        """Convert the transcript to model message format."""
        messages = [
            {
                "role": "user" if msg.speaker is Speaker.USER else "assistant",
                "content": msg.text,
            }
            for msg in session.conversation
        ]
        messages.append({"role": "user", "content": new_message})
        return messages
