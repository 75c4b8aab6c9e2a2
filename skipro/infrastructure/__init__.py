"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- anthropic: Claude API client (analysis, chat, advisories)
- gemini: Gemini text-to-speech
- qveris: Weather and resort search provider
- video: FFmpeg keyframe extraction
- memory: In-process session storage

These wrappers translate between external formats and our domain models.
"""
