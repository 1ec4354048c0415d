"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "WedVite"
    debug: bool = False
    secret_key: str = "change-me-in-production"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./wedvite.db"

    # Public URL used to build RSVP, invitation and companion links
    app_base_url: str = "http://localhost:3000"

    # Resend email API
    resend_api_key: str = ""
    resend_from_email: str = "WedVite <noreply@wedvite.com>"

    # Owner sessions
    access_token_expire_minutes: int = 60 * 24 * 7

    # Scheduled deadline reminders
    reminder_sweep_enabled: bool = True
    reminder_sweep_hours: int = 24
    reminder_lead_days: int = 7


settings = Settings()
