"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Missing AI or weather credentials don't stop the service: advisories
fall back to rules, weather falls back to synthetic readings, and
speech is skipped.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "SkiPro Coach API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys. Using a list enables key rotation without downtime."
    )

    # Anthropic Configuration
    anthropic_api_key: str = Field(
        default="",
        description="Claude API key. Without it, analysis and chat are unavailable and advisories use rules."
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model for video analysis, chat and advisories."
    )
    anthropic_max_tokens: int = Field(
        default=2048,
        description="Max tokens for Claude responses. Reports are short by design."
    )
    anthropic_temperature: float = Field(
        default=0.7,
        description="Temperature for coaching feedback and chat."
    )
    advisory_temperature: float = Field(
        default=0.3,
        description="Temperature for weather advisories. Low, since the reply must be strict JSON."
    )

    # Gemini (speech) Configuration
    gemini_api_key: str = Field(
        default="",
        description="Gemini API key for spoken feedback. Audio is skipped when empty."
    )
    gemini_tts_model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Gemini text-to-speech model"
    )
    gemini_voice: str = Field(
        default="Kore",
        description="Prebuilt voice name for spoken feedback"
    )

    # Qveris (weather and POI provider) Configuration
    qveris_api_key: str = Field(
        default="",
        description="Qveris API key for weather and resort lookups. Synthetic weather is used when empty."
    )
    qveris_base_url: str = Field(
        default="https://qveris.ai/api/v1",
        description="Qveris tool execution API base URL"
    )
    qveris_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for a single Qveris tool call"
    )

    # Timeouts
    weather_timeout_seconds: float = Field(
        default=15.0,
        description="Upper bound for a weather fetch before falling back"
    )
    advisory_timeout_seconds: float = Field(
        default=15.0,
        description="Upper bound for the AI advisory before falling back to rules"
    )
    analysis_timeout_seconds: float = Field(
        default=120.0,
        description="Upper bound for a video analysis call"
    )

    # Weather behaviour
    weather_synthetic_fallback: bool = Field(
        default=True,
        description="Serve a synthetic reading when the provider fails. If False, the API returns 503."
    )
    default_resort_city: str = Field(
        default="北京",
        description="City used for resort lookups when none is given"
    )
    default_resort_keywords: str = Field(
        default="滑雪场",
        description="POI search keywords for resort lookups"
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=30,
        description="Maximum video size in MB."
    )
    speech_text_limit: int = Field(
        default=300,
        description="Characters of the report read aloud."
    )
    video_mock_mode: bool = Field(
        default=False,
        description="Use placeholder keyframes instead of FFmpeg. Enables local dev without FFmpeg."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Report credentials that are missing.

        None of these are fatal; each one disables or degrades a feature.
        """
        missing = []

        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.qveris_api_key:
            missing.append("QVERIS_API_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
