"""API configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3001
    api_token: str = ""  # Pre-shared token for webhook callers
    log_level: str = "INFO"

    model_config = {"env_prefix": "HTSYNC_API_"}


settings = Settings()
