"""
Ski technique coaching.

Contains the goal catalog, the coaching session state machine,
keyframe selection and the coaching service.
"""

from .goals import (
    Discipline,
    GoalCategory,
    SKI_GOALS,
    TrainingGoal,
    UnknownGoalError,
    default_goal,
    get_goal,
    goals_for,
    group_by_category,
)
from .models import (
    MAX_KEYFRAMES,
    ChatMessage,
    CoachingSession,
    CoachingStep,
    InvalidTransitionError,
    MediaTooLargeError,
    MediaValidationError,
    Speaker,
    UnsupportedMediaError,
    UploadedVideo,
    validate_video,
)
from .frames import KeyframeStrategy
from .coach import (
    AnalysisError,
    AnalysisReport,
    SkiCoach,
    SpeechClient,
    VisionModelClient,
    parse_rating,
)

__all__ = [
    "Discipline",
    "GoalCategory",
    "SKI_GOALS",
    "TrainingGoal",
    "UnknownGoalError",
    "default_goal",
    "get_goal",
    "goals_for",
    "group_by_category",
    "MAX_KEYFRAMES",
    "ChatMessage",
    "CoachingSession",
    "CoachingStep",
    "InvalidTransitionError",
    "MediaTooLargeError",
    "MediaValidationError",
    "Speaker",
    "UnsupportedMediaError",
    "UploadedVideo",
    "validate_video",
    "KeyframeStrategy",
    "AnalysisError",
    "AnalysisReport",
    "SkiCoach",
    "SpeechClient",
    "VisionModelClient",
    "parse_rating",
]
