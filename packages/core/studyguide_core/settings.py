"""Environment-driven settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Core settings loaded from environment variables (prefix STUDYGUIDE_)."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Generation service
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o"
    openai_timeout: float = 120.0
    max_output_tokens: int = 16000

    # Streaming
    progress_interval: float = 2.0  # seconds between progress events

    # Fuzzy duplicate thresholds
    dedupe_definition_threshold: float = 0.9
    dedupe_text_threshold: float = 0.9
    dedupe_section_threshold: float = 0.9
    dedupe_prefix_threshold: float = 0.8
    dedupe_question_threshold: float = 0.75
    dedupe_item_threshold: float = 0.85

    model_config = SettingsConfigDict(
        env_prefix="STUDYGUIDE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
