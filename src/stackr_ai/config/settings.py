"""Settings configuration"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration loaded from the environment and ``.env``.

    The ``ai_*`` fields only seed the runtime :class:`SettingsStore`; once the
    process is running the store is the single source of truth for them.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False,
        validate_assignment=True
    )

    # Application
    app_name: str = Field(default="Stackr AI", validation_alias="APP_NAME")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    api_prefix: str = Field(default="/api/ai", validation_alias="API_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5002, validation_alias="PORT", ge=1, le=65535)

    # API Keys
    openai_api_key: Optional[SecretStr] = Field(default=None, validation_alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    perplexity_api_key: Optional[SecretStr] = Field(default=None, validation_alias="PERPLEXITY_API_KEY")

    # Models
    openai_model: str = Field(default="gpt-4o", validation_alias="OPENAI_MODEL")
    anthropic_model: str = Field(default="claude-3-7-sonnet-20250219", validation_alias="ANTHROPIC_MODEL")
    perplexity_model: str = Field(default="llama-3.1-sonar-small-128k-online", validation_alias="PERPLEXITY_MODEL")
    perplexity_base_url: str = Field(default="https://api.perplexity.ai", validation_alias="PERPLEXITY_BASE_URL")
    max_tokens: int = Field(default=1024, validation_alias="MAX_TOKENS", ge=1)
    request_timeout: float = Field(default=30.0, validation_alias="REQUEST_TIMEOUT", gt=0)

    # Cache
    ai_cache_dir: Path = Field(default=Path("./.cache"), validation_alias="AI_CACHE_DIR")
    ai_cache_enabled: bool = Field(default=True, validation_alias="AI_CACHE_ENABLED")
    ai_cache_ttl_seconds: float = Field(default=60 * 60 * 24 * 7, validation_alias="AI_CACHE_TTL_SECONDS", ge=1)

    # Provider policy
    ai_default_provider: str = Field(default="openai", validation_alias="AI_DEFAULT_PROVIDER")
    ai_auto_fallback: bool = Field(default=True, validation_alias="AI_AUTO_FALLBACK")
    ai_max_retries: int = Field(default=3, validation_alias="AI_MAX_RETRIES", ge=1, le=10)

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # Properties
    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
