"""
Domain models for a coaching flow.

The session is the aggregate root: it owns the goal selection, the
uploaded video, the analysis and the conversation that follows, and it
enforces the wizard's state machine. Nothing here knows about HTTP or
the AI providers.

    GOAL -> UPLOAD -> ANALYZING -> RESULT <-> CHAT
      ^        ^__________|  (analysis failed)
      |
    WEATHER (entered from and returning to GOAL)

Any state may restart back to GOAL.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .goals import Discipline, TrainingGoal, default_goal


MAX_KEYFRAMES = 3


class CoachingStep(Enum):
    GOAL = "GOAL"
    UPLOAD = "UPLOAD"
    ANALYZING = "ANALYZING"
    RESULT = "RESULT"
    CHAT = "CHAT"
    WEATHER = "WEATHER"


class Speaker(Enum):
    USER = "user"
    COACH = "coach"


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed in the session's current step."""

    def __init__(self, step: CoachingStep, action: str, reason: str = "") -> None:
        self.step = step
        self.action = action
        message = f"Cannot {action} while in {step.value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MediaValidationError(ValueError):
    """Raised for an upload that is rejected before any state change."""
    pass


class MediaTooLargeError(MediaValidationError):
    pass


class UnsupportedMediaError(MediaValidationError):
    pass


@dataclass
class UploadedVideo:
    """
    A video the user uploaded for analysis.

    Kept in memory for the lifetime of the session only.
    """
    filename: str
    content_type: str
    data: bytes = field(repr=False)
    uploaded_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def validate_video(video: UploadedVideo, max_size_bytes: int) -> None:
    """Reject empty, oversized or non-video uploads."""
    if not video.content_type or not video.content_type.startswith("video/"):
        raise UnsupportedMediaError(f"Expected a video file, got {video.content_type or 'unknown type'}")
    if video.size_bytes == 0:
        raise UnsupportedMediaError("Video file is empty")
    if video.size_bytes > max_size_bytes:
        limit_mb = max_size_bytes // (1024 * 1024)
        raise MediaTooLargeError(f"Video must be smaller than {limit_mb}MB")


@dataclass
class ChatMessage:
    """A single message in the coaching conversation."""
    id: UUID = field(default_factory=uuid4)
    speaker: Speaker = Speaker.USER
    text: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class CoachingSession:
    """
    One coaching flow, from goal selection to follow-up chat.

    State changes only go through the methods below so the step and the
    data it implies never disagree.
    """
    id: UUID = field(default_factory=uuid4)
    step: CoachingStep = CoachingStep.GOAL
    discipline: Discipline = Discipline.SKI
    goal: Optional[TrainingGoal] = field(default_factory=lambda: default_goal(Discipline.SKI))
    user_context: str = ""
    video: Optional[UploadedVideo] = None
    keyframes: list[bytes] = field(default_factory=list, repr=False)
    analysis: Optional[str] = None
    rating: Optional[float] = None
    audio_base64: Optional[str] = field(default=None, repr=False)
    conversation: list[ChatMessage] = field(default_factory=list)
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    # -- queries ------------------------------------------------------------

    @property
    def has_video(self) -> bool:
        return self.video is not None

    @property
    def is_analyzed(self) -> bool:
        return self.analysis is not None

    # -- goal selection -----------------------------------------------------

    def select_discipline(self, discipline: Discipline) -> None:
        """Switch discipline; the goal resets to that discipline's first goal."""
        self._require("switch discipline", CoachingStep.GOAL)
        self.discipline = discipline
        self.goal = default_goal(discipline)
        self._touch()

    def select_goal(self, goal: TrainingGoal) -> None:
        self._require("select a goal", CoachingStep.GOAL)
        if goal.discipline != self.discipline:
            raise InvalidTransitionError(
                self.step,
                "select a goal",
                f"{goal.id} is not a {self.discipline.label} goal",
            )
        self.goal = goal
        self._touch()

    def confirm_goal(self, goal: TrainingGoal, user_context: str = "") -> None:
        """GOAL -> UPLOAD."""
        self.select_goal(goal)
        self.user_context = user_context.strip()
        self.step = CoachingStep.UPLOAD
        self._touch()

    # -- upload and analysis -----------------------------------------------

    def attach_video(
        self,
        video: UploadedVideo,
        keyframes: list[bytes],
        max_size_bytes: int,
    ) -> None:
        """
        Load a video (and its keyframes) for analysis.

        Validation runs first so a rejected upload leaves the session
        untouched. Attaching from GOAL keeps the selected goal and
        moves on to UPLOAD.
        """
        validate_video(video, max_size_bytes)
        self._require("upload a video", CoachingStep.GOAL, CoachingStep.UPLOAD)
        if self.goal is None:
            raise InvalidTransitionError(self.step, "upload a video", "choose a training goal first")

        self.video = video
        self.keyframes = list(keyframes[:MAX_KEYFRAMES])
        self.last_error = None
        self.step = CoachingStep.UPLOAD
        self._touch()

    def begin_analysis(self) -> None:
        """UPLOAD -> ANALYZING. Needs a loaded video."""
        self._require("start analysis", CoachingStep.UPLOAD)
        if self.video is None:
            raise InvalidTransitionError(self.step, "start analysis", "no video uploaded")
        self.last_error = None
        self.step = CoachingStep.ANALYZING
        self._touch()

    def complete_analysis(
        self,
        analysis: str,
        rating: float,
        audio_base64: Optional[str] = None,
    ) -> None:
        """ANALYZING -> RESULT."""
        self._require("complete analysis", CoachingStep.ANALYZING)
        self.analysis = analysis
        self.rating = rating
        self.audio_base64 = audio_base64
        self.step = CoachingStep.RESULT
        self._touch()

    def fail_analysis(self, error: str) -> None:
        """ANALYZING -> UPLOAD, keeping the video so the user can retry."""
        self._require("fail analysis", CoachingStep.ANALYZING)
        self.last_error = error
        self.step = CoachingStep.UPLOAD
        self._touch()

    # -- chat -----------------------------------------------------------------

    def open_chat(self) -> None:
        self._require("open chat", CoachingStep.RESULT)
        self.step = CoachingStep.CHAT
        self._touch()

    def close_chat(self) -> None:
        self._require("close chat", CoachingStep.CHAT)
        self.step = CoachingStep.RESULT
        self._touch()

    def add_message(self, speaker: Speaker, text: str) -> ChatMessage:
        """Append to the conversation and update timestamp."""
        self._require("chat", CoachingStep.CHAT)
        message = ChatMessage(speaker=speaker, text=text)
        self.conversation.append(message)
        self._touch()
        return message

    # -- weather detour -------------------------------------------------------

    def enter_weather(self) -> None:
        """GOAL -> WEATHER. Coaching data is left as is."""
        self._require("open weather", CoachingStep.GOAL)
        self.step = CoachingStep.WEATHER
        self._touch()

    def leave_weather(self) -> None:
        self._require("leave weather", CoachingStep.WEATHER)
        self.step = CoachingStep.GOAL
        self._touch()

    # -- restart --------------------------------------------------------------

    def restart(self) -> None:
        """Any step -> GOAL, dropping goal, media, analysis and transcript."""
        self.step = CoachingStep.GOAL
        self.goal = None
        self.user_context = ""
        self.video = None
        self.keyframes = []
        self.analysis = None
        self.rating = None
        self.audio_base64 = None
        self.conversation = []
        self.last_error = None
        self._touch()

    # -- helpers --------------------------------------------------------------

    def _require(self, action: str, *allowed: CoachingStep) -> None:
        if self.step not in allowed:
            raise InvalidTransitionError(self.step, action)

    def _touch(self) -> None:
        self.updated_at = datetime.utcnow()
