"""
Google Gemini wrapper for spoken coaching feedback.

Implements the SpeechClient protocol from core.coaching.coach.
"""

from .client import (
    GeminiSpeechClient,
    GeminiSpeechConfig,
    SpeechClientError,
    create_speech_client,
)

__all__ = [
    "GeminiSpeechClient",
    "GeminiSpeechConfig",
    "SpeechClientError",
    "create_speech_client",
]
