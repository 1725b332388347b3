"""
Configuration Management

Engine defaults loaded from the environment (JYOTISH_*) or a .env file.
Explicit arguments to the engine always win over these values.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Sidereal zero point: lahiri, raman, kp, fagan
    AYANAMSA: str = Field("lahiri", pattern="^(lahiri|raman|kp|fagan)$")

    # Vimshottari levels built by compute_chart (1 = mahadasha … 5 = prana)
    DASHA_DEPTH: int = Field(3, ge=1, le=5)

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="JYOTISH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
