# usersync/config/settings.py

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "usersync"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Provider account ---
    client_id: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1)
    webhook_secret: str = Field(..., min_length=1)
    webhook_path: str = "/provider/webhook"
    webhook_tolerance_seconds: int = 180
    additional_event_types: List[str] = Field(default_factory=list)

    # --- Actions (synchronous allow/deny on sign-in and sign-up) ---
    action_secret: Optional[str] = None
    action_path: str = "/provider/action"

    # --- Provider API ---
    provider_base_url: str = "https://api.workos.com"
    provider_timeout_seconds: float = 10.0
    provider_max_retries: int = 3
    provider_page_limit: int = 100

    # --- Catch-up ---
    catch_up_horizon_seconds: int = 300  # 5 minutes

    # --- Database ---
    database_url: str

    # --- Redis (admission queue) ---
    redis_url: str
    queue_name: str = "usersync"
    queue_max_attempts: int = 5
    queue_backoff_base_seconds: float = 0.5
    queue_backoff_max_seconds: float = 30.0
    queue_poll_timeout_seconds: float = 1.0

    # --- Messaging (downstream hook) ---
    rabbitmq_url: Optional[str] = None
    hook_exchange: str = "user_events"

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


# Singleton for direct import (e.g. in infrastructure clients)
settings = get_settings()
