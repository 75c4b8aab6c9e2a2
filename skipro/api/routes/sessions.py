"""
Coaching session API endpoints.

A session walks the coaching wizard:

    GOAL -> UPLOAD -> ANALYZING -> RESULT <-> CHAT
    GOAL <-> WEATHER

Every action endpoint returns the session snapshot so the client can
render whatever step it lands in. Actions that aren't allowed in the
current step return 409 and leave the session unchanged.
"""

import logging
import os
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from ...core.coaching.coach import AnalysisError
from ...core.coaching.goals import Discipline, UnknownGoalError, get_goal
from ...core.coaching.models import (
    ChatMessage,
    CoachingSession,
    CoachingStep,
    InvalidTransitionError,
    MediaTooLargeError,
    MediaValidationError,
    UploadedVideo,
    validate_video,
)
from ...infrastructure.memory.sessions import InMemorySessionRepository, SessionNotFoundError
from ...infrastructure.video.processor import FrameExtractionError
from ..dependencies import (
    AuthenticatedUser,
    SessionRepositoryDep,
    SettingsDep,
    SkiCoachDep,
    VideoProcessorDep,
)
from .goals import GoalItem

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class DisciplineRequest(BaseModel):
    discipline: Discipline


class GoalRequest(BaseModel):
    goal_id: str = Field(min_length=1, description="Goal id from the catalog")
    user_context: str = Field(
        default="",
        max_length=1000,
        description="Anything the coach should know (level, what feels wrong)",
    )


class ChatRequest(BaseModel):
    """Request to continue coaching conversation."""
    message: str = Field(
        description="User's question or comment",
        min_length=1,
        max_length=2000,
    )


class MessageItem(BaseModel):
    """Single message in conversation history."""
    id: UUID
    speaker: str = Field(description="user or coach")
    text: str
    timestamp: str = Field(description="When the message was sent (ISO format)")

    @classmethod
    def from_message(cls, message: ChatMessage) -> "MessageItem":
        return cls(
            id=message.id,
            speaker=message.speaker.value,
            text=message.text,
            timestamp=message.timestamp.isoformat(),
        )


class VideoItem(BaseModel):
    filename: str
    content_type: str
    size_bytes: int
    uploaded_at: str


class SessionResponse(BaseModel):
    """Complete session snapshot."""
    session_id: UUID
    step: CoachingStep
    discipline: Discipline
    goal: Optional[GoalItem] = None
    user_context: str = ""
    video: Optional[VideoItem] = None
    keyframe_count: int = 0
    analysis: Optional[str] = Field(None, description="Markdown coaching report")
    rating: Optional[float] = Field(None, description="Score out of 10")
    audio_base64: Optional[str] = Field(None, description="Spoken feedback, if synthesized")
    messages: list[MessageItem] = []
    last_error: Optional[str] = None
    created_at: str
    updated_at: str


class ChatResponse(BaseModel):
    """Response with coach's message."""
    session_id: UUID
    user_message: str = Field(description="The user's message (echoed)")
    reply: MessageItem = Field(description="The coach's response")
    message_count: int = Field(description="Total messages in conversation")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_response(session: CoachingSession) -> SessionResponse:
    video = session.video
    return SessionResponse(
        session_id=session.id,
        step=session.step,
        discipline=session.discipline,
        goal=GoalItem.from_goal(session.goal) if session.goal else None,
        user_context=session.user_context,
        video=VideoItem(
            filename=video.filename,
            content_type=video.content_type,
            size_bytes=video.size_bytes,
            uploaded_at=video.uploaded_at.isoformat(),
        ) if video else None,
        keyframe_count=len(session.keyframes),
        analysis=session.analysis,
        rating=session.rating,
        audio_base64=session.audio_base64,
        messages=[MessageItem.from_message(m) for m in session.conversation],
        last_error=session.last_error,
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat(),
    )


def _load_session(repository: InMemorySessionRepository, session_id: UUID) -> CoachingSession:
    try:
        return repository.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )


def _conflict(session: CoachingSession, error: InvalidTransitionError) -> HTTPException:
    logger.warning(
        "Rejected session action",
        extra={"session_id": str(session.id), "step": session.step.value, "action": error.action},
    )
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))


def _video_suffix(filename: str) -> str:
    suffix = os.path.splitext(filename)[1].lower()
    return suffix if suffix else ".mp4"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a coaching session",
)
async def create_session(
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = repository.create_session()
    logger.info("Session created", extra={"session_id": str(session.id)})
    return _to_response(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get session details",
)
async def get_session(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    return _to_response(_load_session(repository, session_id))


@router.post(
    "/{session_id}/discipline",
    response_model=SessionResponse,
    summary="Switch between ski and snowboard",
    description="Only in GOAL. The goal resets to the first goal of the new discipline.",
)
async def select_discipline(
    session_id: UUID,
    request: DisciplineRequest,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    try:
        session.select_discipline(request.discipline)
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/goal",
    response_model=SessionResponse,
    summary="Confirm the training goal",
    description="GOAL -> UPLOAD",
)
async def confirm_goal(
    session_id: UUID,
    request: GoalRequest,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)

    try:
        goal = get_goal(request.goal_id)
    except UnknownGoalError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        session.confirm_goal(goal, request.user_context)
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    logger.info("Goal confirmed", extra={"session_id": str(session.id), "goal_id": goal.id})
    return _to_response(session)


@router.post(
    "/{session_id}/video",
    response_model=SessionResponse,
    summary="Upload a video",
    description="Accepted in GOAL (with a goal selected) or UPLOAD. Replaces any earlier clip.",
    responses={
        400: {"description": "Not a video, or empty"},
        409: {"description": "Not allowed in the current step"},
        413: {"description": "Video too large"},
    },
)
async def upload_video(
    session_id: UUID,
    video: Annotated[UploadFile, File(description="Ski or snowboard clip (MP4, MOV, etc.)")],
    api_key: AuthenticatedUser,
    settings: SettingsDep,
    repository: SessionRepositoryDep,
    video_processor: VideoProcessorDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)

    video_data = await video.read()
    upload = UploadedVideo(
        filename=video.filename or "video.mp4",
        content_type=video.content_type or "",
        data=video_data,
    )

    # Reject bad uploads before spending time on frame extraction
    try:
        validate_video(upload, settings.max_upload_size_bytes)
    except MediaTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except MediaValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if session.step not in (CoachingStep.GOAL, CoachingStep.UPLOAD):
        raise _conflict(session, InvalidTransitionError(session.step, "upload a video"))

    keyframes: list[bytes] = []
    if video_processor is not None:
        try:
            frames = await video_processor.extract_keyframes(
                video_data, suffix=_video_suffix(upload.filename)
            )
            keyframes = [frame.data for frame in frames]
        except FrameExtractionError as e:
            logger.warning(
                "Keyframe extraction failed",
                extra={"session_id": str(session.id), "error": str(e)},
            )

    try:
        session.attach_video(upload, keyframes, settings.max_upload_size_bytes)
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    logger.info(
        "Video attached",
        extra={
            "session_id": str(session.id),
            "size_bytes": upload.size_bytes,
            "keyframes": len(session.keyframes),
        },
    )
    return _to_response(session)


@router.post(
    "/{session_id}/analyze",
    response_model=SessionResponse,
    summary="Analyze the uploaded video",
    description="UPLOAD -> RESULT. On failure returns 502 and the session stays in UPLOAD.",
    responses={502: {"description": "Analysis failed, retry"}},
)
async def analyze_video(
    session_id: UUID,
    api_key: AuthenticatedUser,
    coach: SkiCoachDep,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)

    try:
        await coach.run_analysis(session)
    except InvalidTransitionError as e:
        raise _conflict(session, e)
    except AnalysisError as e:
        repository.save_session(session)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/chat/open",
    response_model=SessionResponse,
    summary="Open the follow-up chat",
    description="RESULT -> CHAT",
)
async def open_chat(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    try:
        session.open_chat()
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/chat/close",
    response_model=SessionResponse,
    summary="Close the follow-up chat",
    description="CHAT -> RESULT. The transcript is kept.",
)
async def close_chat(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    try:
        session.close_chat()
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/chat",
    response_model=ChatResponse,
    summary="Ask the coach a follow-up question",
    description="Only in CHAT. The coach always answers, falling back to a canned reply.",
)
async def chat_with_coach(
    session_id: UUID,
    request: ChatRequest,
    api_key: AuthenticatedUser,
    coach: SkiCoachDep,
    repository: SessionRepositoryDep,
) -> ChatResponse:
    session = _load_session(repository, session_id)

    try:
        reply = await coach.continue_conversation(session, request.message)
    except InvalidTransitionError as e:
        raise _conflict(session, e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    repository.save_session(session)

    logger.info(
        "Chat message processed",
        extra={
            "session_id": str(session_id),
            "response_length": len(reply.text),
            "total_messages": len(session.conversation),
        }
    )
    return ChatResponse(
        session_id=session.id,
        user_message=request.message,
        reply=MessageItem.from_message(reply),
        message_count=len(session.conversation),
    )


@router.post(
    "/{session_id}/weather/enter",
    response_model=SessionResponse,
    summary="Open the weather view",
    description="GOAL -> WEATHER",
)
async def enter_weather(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    try:
        session.enter_weather()
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/weather/leave",
    response_model=SessionResponse,
    summary="Leave the weather view",
    description="WEATHER -> GOAL",
)
async def leave_weather(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    try:
        session.leave_weather()
    except InvalidTransitionError as e:
        raise _conflict(session, e)

    repository.save_session(session)
    return _to_response(session)


@router.post(
    "/{session_id}/restart",
    response_model=SessionResponse,
    summary="Start over",
    description="Back to GOAL from any step, clearing the goal, video, analysis and chat",
)
async def restart_session(
    session_id: UUID,
    api_key: AuthenticatedUser,
    repository: SessionRepositoryDep,
) -> SessionResponse:
    session = _load_session(repository, session_id)
    session.restart()
    repository.save_session(session)
    logger.info("Session restarted", extra={"session_id": str(session.id)})
    return _to_response(session)
