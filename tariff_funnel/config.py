"""Configuration management for the tariff funnel API."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="SQLAlchemy async database URL (postgresql+asyncpg://... in production)",
    )
    auto_create_schema: bool = Field(
        default=True, description="Create missing tables on startup"
    )
    seed_reference_data: bool = Field(
        default=True, description="Upsert tariffs and vouchers on startup"
    )

    # API Configuration
    api_port: int = Field(default=8000, description="API server port")
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_base_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL used by the funnel client",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Security
    secret_key: str = Field(
        default="change-me-in-production", description="Secret key for JWT signing"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(
        default=60 * 24, description="Access token expiration in minutes"
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor")
    password_reset_expire_minutes: int = Field(
        default=60, description="Lifetime of a password reset token in minutes"
    )

    # Funnel Settings
    default_funnel_id: str = Field(
        default="enfinitus-website", description="Funnel used when a request names none"
    )
    floor_discounted_prices: bool = Field(
        default=False,
        description="Clamp voucher-discounted prices at zero (off keeps reference behavior)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
