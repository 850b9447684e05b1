"""
Application Settings for the Admissions Backend

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The hosted Supabase project owns storage and identity; this service
    only needs the project URL, a service-role key for table access and
    admin operations, and the JWT secret for the HS256 fallback.
    """

    # Supabase Configuration
    supabase_url: str
    supabase_service_role_key: str
    supabase_jwt_secret: Optional[str] = None
    postgrest_timeout: int = 10

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Parsing / submission
    min_application_fragment_length: int = 50
    application_id_padding: int = 4
    parser_country_code_marker: str = "+974"

    # Admin user management
    min_password_length: int = 6

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_supabase_url(self) -> "Settings":
        """Normalize the Supabase URL so derived endpoints join cleanly."""
        self.supabase_url = self.supabase_url.rstrip("/")
        if not self.supabase_url.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must start with http:// or https://")
        return self

    @property
    def jwt_issuer(self) -> str:
        """Issuer claim Supabase puts on access tokens."""
        return f"{self.supabase_url}/auth/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
