# barber_agenda/config.py

from functools import lru_cache
from typing import Literal, Optional
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./barber_agenda.db"
    DB_ECHO: bool = False

    # Security
    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Bootstrap admin (created at startup when both are set)
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Admin"

    # Scheduling
    TIMEZONE: str = "America/Sao_Paulo"
    PAGE_SIZE: int = 5
    RECENT_DAYS: int = 30
    OFF_CATALOG_POLICY: Literal["ignore", "reject"] = "ignore"

    # WhatsApp gateway and reminders
    WHATSAPP_GATEWAY_URL: Optional[str] = None
    WHATSAPP_TIMEOUT: float = 10.0
    CRON_SECRET: Optional[str] = None
    RETURN_REMINDER_DAYS: int = 30
    RETURN_REMINDER_MESSAGE: str = "Olá, já se passaram 30 dias desde o seu último agendamento!"

    LOG_LEVEL: str = "INFO"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
