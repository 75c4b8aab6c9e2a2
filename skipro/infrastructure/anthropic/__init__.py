"""
Anthropic Claude API client wrapper.

Implements the VisionModelClient protocol from core.coaching.coach and
the TextModelClient protocol from core.advisory.orchestrator.
"""

from .client import (
    AnthropicClientError,
    AnthropicConfig,
    AnthropicVisionClient,
    RateLimitExceeded,
    create_anthropic_client,
)

__all__ = [
    "AnthropicClientError",
    "AnthropicConfig",
    "AnthropicVisionClient",
    "RateLimitExceeded",
    "create_anthropic_client",
]
