"""
Anthropic Claude API client wrapper.

This module provides a thin wrapper around the Anthropic SDK that:
1. Implements our VisionModelClient and TextModelClient protocols
2. Handles API-specific details (base64 encoding, message format)
3. Provides consistent error handling
4. Enables easy mocking for tests

Uses the async SDK client so callers' asyncio timeouts cancel the
request instead of blocking the event loop.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
from anthropic import APIError, RateLimitError


logger = logging.getLogger(__name__)


class AnthropicClientError(Exception):
    """Raised when API calls fail."""
    pass


class RateLimitExceeded(AnthropicClientError):
    """Raised when we hit rate limits."""
    pass


@dataclass
class AnthropicConfig:
    """
    Configuration for the Anthropic client.

    Validated at construction time so a bad config fails at startup,
    not on the first request.
    """
    api_key: str
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 2048
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")
        if not 0 <= self.temperature <= 1:
            raise ValueError("temperature must be between 0 and 1")


class AnthropicVisionClient:
    """
    Claude-backed implementation of the coach and advisory model protocols.

    This class knows about Anthropic's API format but doesn't know
    about skiing or coaching. It just sends images and text and gets
    responses back.
    """

    def __init__(self, config: AnthropicConfig) -> None:
        self._config = config
        self._client = anthropic.AsyncAnthropic(api_key=config.api_key)

    async def analyze_images(
        self,
        images: list[bytes],
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """
        Send images to Claude for analysis.

        Images are base64 encoded and sent as part of the user message.
        """
        if not images:
            raise ValueError("At least one image is required")

        content = self._build_image_content(images, user_prompt)
        return await self._create(
            system_prompt=system_prompt,
            messages=[{"role": "user", "content": content}],
            operation="analyze_images",
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str,
    ) -> str:
        """
        Continue a conversation with Claude.

        Takes a list of messages in the format:
        [{"role": "user", "content": "..."}, {"role": "assistant", "content": "..."}]
        """
        if not messages:
            raise ValueError("At least one message is required")

        return await self._create(
            system_prompt=system_prompt,
            messages=self._validate_messages(messages),
            operation="chat",
        )

    async def complete(
        self,
        prompt: str,
        system_prompt: str,
        temperature: Optional[float] = None,
    ) -> str:
        """Single-turn text completion, used for weather advisories."""
        return await self._create(
            system_prompt=system_prompt,
            messages=[{"role": "user", "content": prompt}],
            operation="complete",
            temperature=temperature,
        )

    async def _create(
        self,
        system_prompt: str,
        messages: list[dict],
        operation: str,
        temperature: Optional[float] = None,
    ) -> str:
        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature if temperature is None else temperature,
                system=system_prompt,
                messages=messages,
            )
        except RateLimitError as e:
            logger.warning("Rate limit hit", extra={"operation": operation, "error": str(e)})
            raise RateLimitExceeded("API rate limit exceeded. Please try again later.") from e
        except APIError as e:
            logger.error(
                "API error",
                extra={
                    "operation": operation,
                    "error": str(e),
                    "status": getattr(e, "status_code", None),
                },
            )
            raise AnthropicClientError(f"API error: {e.message}") from e

        return self._extract_text_response(response)

    def _build_image_content(
        self,
        images: list[bytes],
        text_prompt: str,
    ) -> list[dict]:
        """
        Build the content array for a multi-image request.

        Claude expects:
        [
            {"type": "image", "source": {"type": "base64", "media_type": "image/jpeg", "data": "..."}},
            {"type": "text", "text": "..."}
        ]
        """
        content = []

        for image in images:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": self._detect_image_type(image),
                    "data": base64.b64encode(image).decode("utf-8"),
                }
            })

        content.append({
            "type": "text",
            "text": text_prompt,
        })

        return content

    def _detect_image_type(self, image_data: bytes) -> str:
        """Detect image MIME type from magic bytes. FFmpeg gives us JPEG."""
        if image_data[:3] == b'\xff\xd8\xff':
            return "image/jpeg"
        elif image_data[:8] == b'\x89PNG\r\n\x1a\n':
            return "image/png"
        elif image_data[:6] in (b'GIF87a', b'GIF89a'):
            return "image/gif"
        elif image_data[:4] == b'RIFF' and image_data[8:12] == b'WEBP':
            return "image/webp"
        else:
            return "image/jpeg"

    def _validate_messages(
        self,
        messages: list[dict[str, str]],
    ) -> list[dict[str, str]]:
        """
        Validate and clean message format.

        Drops empty messages and merges consecutive messages from the
        same role, since Claude expects alternating turns.
        """
        validated: list[dict[str, str]] = []

        for msg in messages:
            role = msg.get("role", "")
            content = msg.get("content", "")

            if role not in ("user", "assistant"):
                raise ValueError(f"Invalid message role: {role}")
            if not content:
                continue

            if validated and validated[-1]["role"] == role:
                validated[-1] = {"role": role, "content": validated[-1]["content"] + "\n\n" + content}
                continue

            validated.append({"role": role, "content": content})

        if not validated or validated[0]["role"] != "user":
            raise ValueError("Conversation must start with a user message")

        return validated

    def _extract_text_response(self, response) -> str:
        """Extract text content from API response."""
        if not response.content:
            return ""

        text_blocks = [
            block.text
            for block in response.content
            if hasattr(block, 'text')
        ]

        return "\n".join(text_blocks)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_anthropic_client(
    api_key: Optional[str],
    model: str = "claude-sonnet-4-20250514",
    max_tokens: int = 2048,
    temperature: float = 0.7,
) -> Optional[AnthropicVisionClient]:
    """
    Build a configured client, or None when no key is set.

    Returning None lets the advisory service skip the AI path entirely
    instead of failing a round-trip on every request.
    """
    if not api_key:
        logger.warning("ANTHROPIC_API_KEY not set, AI features disabled")
        return None

    config = AnthropicConfig(
        api_key=api_key,
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return AnthropicVisionClient(config)
