"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Supabase
    supabase_url: str
    supabase_service_role_key: str
    supabase_anon_key: str

    # n8n automation webhook (unset or empty disables notifications)
    n8n_webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0

    # Read-after-write polling before a notification is sent
    notify_max_attempts: int = 5
    notify_backoff_seconds: float = 0.5

    # How long shutdown waits for detached notifications to finish
    notify_shutdown_grace_seconds: float = 15.0

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.n8n_webhook_url and self.n8n_webhook_url.strip())

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
