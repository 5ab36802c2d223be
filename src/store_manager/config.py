"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    openai_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    storage_dir: str = ".store_manager"
    camera_device: int = 0
    scanner_idle_ms: int = 120
    scanner_min_length: int = 3
    camera_repeat_window_seconds: float = 2.0
    placeholder_image_url: str = "https://placehold.co/100x100.png"
    store_name: str = "My Mart"
    store_address: str = "123 Market Street, Karachi, Pakistan"
    store_phone: str = "+92 311 9991972"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
