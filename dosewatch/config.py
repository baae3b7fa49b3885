"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Dosage thresholds are not part of this class; they are user-editable
    and persisted through the durable store as a ``DosageSettings`` record.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Durable store
    store_backend: str = "memory"  # 'memory' or 'redis'
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "dosewatch:"

    # Risk evaluation tick
    tick_enabled: bool = True
    tick_interval_seconds: int = 1

    # Notifications
    notification_buffer_size: int = 50

    # Logging
    log_format: str = "json"  # 'json' or 'text'
    log_level: str = "INFO"
    service_name: str = "dosewatch-api"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Testing
    testing: bool = False  # Disables the background tick scheduler


settings = Settings()
