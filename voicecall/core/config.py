"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Retell (server-side only, never sent to callers)
    retell_api_key: Optional[str] = None
    retell_from_number: Optional[str] = None
    retell_agent_id: Optional[str] = None
    retell_api_base_url: str = "https://api.retellai.com"

    # Widget
    assistant_name: str = "Shakti AI"
    agent_display_name: str = "Anshika"
    proxy_url: str = "http://localhost:8000/functions/retell-call"
    timer_interval_seconds: float = 1.0
    ended_reset_delay_seconds: float = 2.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
