"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class MailboxConfig(BaseModel):
    """Mailpit REST API configuration."""

    base_url: str = "http://localhost:8025"
    username: str = ""
    password: SecretStr = SecretStr("")
    verify_tls: bool = False
    page_limit: int = 1000
    timeout_secs: float = 15.0


class GeminiConfig(BaseModel):
    """Generative summarizer configuration."""

    api_key: SecretStr = SecretStr("")
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_secs: float = 30.0
    body_char_limit: int = 500


class SmtpConfig(BaseModel):
    """Outbound report mail configuration."""

    host: str = ""
    port: int = 587
    secure: bool = False
    starttls: bool = True
    verify_tls: bool = False
    username: str = ""
    password: SecretStr = SecretStr("")
    from_email: str = "alerts@example.com"
    to_emails: list[str] = []
    timeout_secs: float = 30.0


class ScheduleConfig(BaseModel):
    """When the daily report fires and which day it covers."""

    enabled: bool = True
    hour: int = 0
    minute: int = 5
    window_policy: Literal["previous", "current"] = "previous"
    check_interval_secs: float = 30.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    mailbox: MailboxConfig = MailboxConfig()
    gemini: GeminiConfig = GeminiConfig()
    smtp: SmtpConfig = SmtpConfig()
    schedule: ScheduleConfig = ScheduleConfig()
    logging: LoggingConfig = LoggingConfig()

    def missing_required(self) -> list[str]:
        """Names of required settings that are unset."""
        missing: list[str] = []
        if not self.gemini.api_key.get_secret_value():
            missing.append("gemini.api_key")
        if not self.smtp.host:
            missing.append("smtp.host")
        if not self.smtp.to_emails:
            missing.append("smtp.to_emails")
        return missing


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
