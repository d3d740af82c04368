import json
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    PORT: int = 5000

    # API Configuration
    PROJECT_NAME: str = "Portfolio Backend API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # CORS (JSON list or comma-separated in the environment)
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
    ]

    # Mail sender credentials (also used as the SMTP login)
    EMAIL_USER: Optional[str] = None
    EMAIL_PASS: Optional[str] = None

    # Where owner notifications are delivered
    CONTACT_EMAIL: Optional[str] = None

    # Signature used in the acknowledgement email
    SITE_OWNER_NAME: str = "Haris Qureshi"

    # SMTP transport
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USE_TLS: bool = True  # implicit TLS; False means STARTTLS on a plain port
    SMTP_TIMEOUT_SECONDS: float = 30.0
    SMTP_MAX_CONNECTIONS: int = 5  # Concurrent connections in the pool
    SMTP_MAX_MESSAGES: int = 100  # Messages per connection before it is recycled

    # Contact endpoint rate limiting
    CONTACT_RATE_LIMIT_MAX: int = 5
    CONTACT_RATE_LIMIT_WINDOW_MINUTES: int = 15

    # Form client
    CONTACT_API_URL: str = "http://localhost:5000/api/contact"
    CONTACT_FORM_TIMEOUT_SECONDS: float = 10.0

    # Time given to in-flight mail dispatches on shutdown
    SHUTDOWN_GRACE_SECONDS: float = 5.0

    # Log Level
    LOG_LEVEL: str = "INFO"

    # Logging Configuration
    LOGGING_FRAME_DEPTH: int = (
        6  # Frame depth for finding logging call origin in stack trace
    )

    # Sentry Configuration
    SENTRY_DSN: Optional[str] = None  # Sentry DSN for error tracking

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _parse_origins(cls, value):
        """Accept a JSON list or a comma-separated string."""
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    # --------- Properties ---------
    @property
    def is_production(self) -> bool:
        """True for "production" or "prod" (case-insensitive)."""
        return self.ENVIRONMENT.lower() in ["production", "prod"]

    @property
    def is_local(self) -> bool:
        """
        Check if running in local development environment.

        Supported values:
        - "local", "local_dev" or "development" → True
        - anything else → False (deployed)
        """
        return self.ENVIRONMENT.lower() in ["local", "local_dev", "development"]

    @property
    def mail_configured(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS and self.CONTACT_EMAIL)


settings = Settings()
