"""
Prompt gateway configuration.

Read once from the environment at startup and passed explicitly to the
app factory and the upstream client.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Service settings from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Completion endpoint
    gpt_model: str = ""
    gpt_max_tokens: int = 0  # 0 means "let upstream decide"
    gpt_url: str = ""
    gpt_token: str = ""
    gpt_timeout: Optional[float] = None  # seconds, None waits forever

    # Logging
    log_level: str = "info"

    # Version
    version: str = "1.0.0"

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    @field_validator("gpt_max_tokens", mode="before")
    @classmethod
    def lenient_max_tokens(cls, v):
        """A non-numeric GPT_MAX_TOKENS becomes 0 instead of failing startup."""
        if isinstance(v, int):
            return v
        try:
            return int(v)
        except (TypeError, ValueError):
            logger.warning("GPT_MAX_TOKENS=%r is not an integer, using 0", v)
            return 0

    @field_validator("gpt_timeout", mode="before")
    @classmethod
    def empty_timeout_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
