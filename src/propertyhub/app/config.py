"""Application configuration via Pydantic Settings."""

import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# Resolve .env from the project root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./propertyhub.db"

    # Sessions
    session_cookie_name: str = "propertyhub_session"
    session_max_age_days: int = 30
    environment: str = "development"

    # Password hashing
    bcrypt_rounds: int = 10

    # Lead notifications (email via SendGrid, SMS via Twilio)
    sendgrid_api_key: str = ""
    notification_from_email: str = ""
    admin_email: str = ""
    admin_phone: str = ""
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    notification_queue_size: int = 100

    # CORS / Frontend
    cors_origins: str = "http://localhost:5173"
    public_base_url: str = "http://localhost:8000"

    # Uploads
    uploads_dir: str = str(Path(__file__).resolve().parents[3] / "uploads")
    max_upload_mb: int = 10
    max_upload_files: int = 10
    # Signs presigned upload URLs; set it explicitly when running more than one worker
    upload_signing_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    upload_url_ttl_seconds: int = 900

    # Listing rules
    enforce_price_range: bool = True
    restrict_property_writes_to_brokers: bool = False

    # General
    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
