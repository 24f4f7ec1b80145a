# kitchen/config.py
from datetime import time
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Required configuration is missing or malformed."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Store
    DATABASE_URL: str = Field(default="")

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str = Field(default="")
    VAPID_PRIVATE_KEY: str = Field(default="")
    VAPID_SUBJECT: str = Field(default="mailto:admin@karmic.co.in")
    PUSH_CONCURRENCY: int = Field(default=20)

    # Auth
    JWT_SECRET: str = Field(default="change-me")
    SERVICE_KEY: str = Field(default="")  # bearer credential for cron/edge triggers
    COOKIE_SECURE: bool = True
    ALLOWED_EMAIL_DOMAIN: str = Field(default="karmic.co.in")

    # Business rules
    TIMEZONE: str = Field(default="Asia/Kolkata")
    CUTOFF: str = Field(default="12:30")
    REMINDER_LOCATION: str = Field(default="Main Office")
    REMINDER_TIME: str = Field(default="10:30")
    ENABLE_SCHEDULER: bool = False

    LOG_LEVEL: str = Field(default="INFO")

    # Admin seed
    ADMIN_EMAIL: str | None = None
    ADMIN_PASS: str | None = None
    ADMIN_NAME: str | None = "Admin"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    @property
    def cutoff_time(self) -> time:
        return parse_hhmm(self.CUTOFF)

    @property
    def reminder_time(self) -> time:
        return parse_hhmm(self.REMINDER_TIME)


def parse_hhmm(value: str) -> time:
    try:
        h, m = value.strip().split(":")
        return time(int(h), int(m))
    except ValueError:
        raise ConfigError(f"Invalid HH:MM value: {value!r}")


_settings: Settings | None = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


def validate_settings(settings: Settings | None = None) -> Settings:
    """Fail fast when the store or the push signing keys are not configured."""
    settings = settings or get_settings()
    missing = [
        name for name in ("DATABASE_URL", "VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY")
        if not (getattr(settings, name) or "").strip()
    ]
    if missing:
        raise ConfigError("Missing required settings: " + ", ".join(missing))
    try:
        settings.tz
    except Exception as exc:
        raise ConfigError(f"Unknown TIMEZONE {settings.TIMEZONE!r}") from exc
    parse_hhmm(settings.CUTOFF)
    parse_hhmm(settings.REMINDER_TIME)
    return settings
