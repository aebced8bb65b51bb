"""Configuration settings for the assistant bridge service."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Upstream assistant
    pinecone_api_key: Optional[str] = None
    pinecone_assistant_name: Optional[str] = None
    pinecone_assistant_host: str = "https://prod-1-data.ke.pinecone.io"
    pinecone_api_version: str = "2025-04"
    assistant_model: str = "gpt-4.1"

    # Upstream HTTP timeouts (seconds)
    upstream_connect_timeout: float = 30.0
    upstream_read_timeout: float = 600.0

    # Rendering
    assistant_display_name: str = "Pinecone"
    file_download_path: str = "/files/{file_id}/download"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    def missing_config_message(self) -> Optional[str]:
        """Return the error message for missing required settings, if any."""
        if not self.pinecone_assistant_name:
            return "Missing PINECONE_ASSISTANT_NAME"
        return None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
