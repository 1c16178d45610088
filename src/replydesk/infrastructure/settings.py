"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Replydesk"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Mailbox credentials (shared by IMAP and SMTP)
    mail_user: str = ""
    mail_password: SecretStr = Field(default=SecretStr(""))
    mail_from: str | None = None

    # IMAP store
    imap_host: str = "imap.gmail.com"
    imap_port: int = 993
    imap_folder: str = "INBOX"
    fetch_limit: int = Field(default=10, ge=1)

    # SMTP relay
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465

    # Timeouts (seconds)
    connect_timeout_seconds: float = 30.0
    fetch_timeout_seconds: float = 60.0
    send_timeout_seconds: float = 30.0

    # Reply suggestions
    anthropic_api_key: SecretStr | None = None
    anthropic_model: str = "claude-3-haiku-20240307"
    anthropic_max_tokens: int = 512
    suggestion_count: int = 3

    @computed_field
    @property
    def sender_address(self) -> str:
        """Address placed in From on outbound replies."""
        return self.mail_from or self.mail_user


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
