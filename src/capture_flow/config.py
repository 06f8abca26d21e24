"""
Configuration settings for Capture Flow.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Capture Flow"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry & Backoff ===
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_INITIAL_DELAY_MS: float = 500.0
    RETRY_MAX_DELAY_MS: float = 5000.0
    RETRY_BACKOFF_MULTIPLIER: float = 2.0  # 1.0 = fixed delay
    RETRY_JITTER_FRACTION: float = 0.2  # +/-20% around the computed delay
    RETRYABLE_ERROR_MARKERS: list[str] = [
        "timeout",
        "network",
        "FAILED_TO_START_DEVICE",
        "NotFoundError",
        "device not found",
        "temporary",
    ]

    # === Timeouts ===
    OPERATION_TIMEOUT_MS: float = 30000.0  # per guarded step
    CANCEL_ON_TIMEOUT: bool = True  # False leaves timed-out operations detached

    # === Cache ===
    CACHE_ENABLED: bool = True
    CACHE_NAMESPACE: str = "assistant-cache"
    CACHE_KEY_PREFIX: str = "/capture"
    CACHE_CONTROL: str = "public, max-age=86400"
    CACHE_TTL_SECONDS: int = 86400  # 24 hours

    # === Redis ===
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 20

    # === Capture Provider ===
    CAPTURE_BASE_URL: str = "http://capture:8080"
    CAPTURE_PATH: str = "/capture"
    CAPTURE_TIMEOUT: int = 30  # seconds, HTTP client level

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
