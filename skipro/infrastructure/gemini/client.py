"""
Gemini text-to-speech wrapper.

Implements the SpeechClient protocol from core.coaching.coach. Returns
the synthesized audio base64-encoded so it can travel in JSON and be
played client-side.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import errors, types


logger = logging.getLogger(__name__)


class SpeechClientError(Exception):
    """Raised when speech synthesis fails or returns no audio."""
    pass


@dataclass
class GeminiSpeechConfig:
    api_key: str
    model: str = "gemini-2.5-flash-preview-tts"
    voice: str = "Kore"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")


class GeminiSpeechClient:
    """Text in, base64 audio out."""

    def __init__(self, config: GeminiSpeechConfig) -> None:
        self._config = config
        self._client = genai.Client(api_key=config.api_key)

    async def synthesize(self, text: str) -> str:
        if not text.strip():
            raise ValueError("Text is required")

        try:
            response = await self._client.aio.models.generate_content(
                model=self._config.model,
                contents=text,
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=self._config.voice,
                            )
                        )
                    ),
                ),
            )
        except errors.APIError as e:
            logger.error("Speech API error", extra={"error": str(e), "status": e.code})
            raise SpeechClientError(f"Speech API error: {e.message}") from e

        audio = self._extract_audio(response)
        if not audio:
            raise SpeechClientError("Speech response contained no audio")

        return base64.b64encode(audio).decode("utf-8")

    def _extract_audio(self, response) -> Optional[bytes]:
        for candidate in response.candidates or []:
            content = candidate.content
            for part in (content.parts if content else None) or []:
                if part.inline_data and part.inline_data.data:
                    return part.inline_data.data
        return None


def create_speech_client(
    api_key: Optional[str],
    model: str = "gemini-2.5-flash-preview-tts",
    voice: str = "Kore",
) -> Optional[GeminiSpeechClient]:
    """Build a configured client, or None when no key is set."""
    if not api_key:
        logger.warning("GEMINI_API_KEY not set, spoken feedback disabled")
        return None
    return GeminiSpeechClient(GeminiSpeechConfig(api_key=api_key, model=model, voice=voice))
