"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    inventory_table: str = "inventory_items"
    sync_state_table: str = "user_sync_state"
    local_store_path: Path = Path("data/inventory.json")
    seed_on_first_run: bool = True
    reminder_service_url: str | None = None
    reminder_service_token: str | None = None
    reminder_lead_days: int = 1
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
