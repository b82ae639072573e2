"""Application configuration settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration values loaded from ``AUDIENCE_ENGINE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIENCE_ENGINE_", env_file=".env", env_file_encoding="utf-8"
    )

    service_name: str = Field(default="audience-engine", min_length=1)
    log_level: str = Field(
        default="info", description="stdlib logging level name used by configure_logging"
    )
    data_dir: str = Field(
        default="data/industries",
        description="Directory holding one sub-directory of JSON files per industry",
    )
    industry_id: str = Field(default="ecommerce", description="Dataset loaded at startup")
    entry_section_id: str = Field(
        default="entry", description="Section whose rules define audience membership"
    )
    preview_limit: int = Field(default=20, gt=0, description="Default customer preview size")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
