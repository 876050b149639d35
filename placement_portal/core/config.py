"""Application configuration management."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "Placement Portal"

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./placement_portal.db",
        description="Async SQLAlchemy URL; use sqlite+aiosqlite:///:memory: for a non-durable store",
    )
    database_echo: bool = False

    # Security
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = Field(default=1440, ge=1)

    # Logging
    log_level: str = "INFO"

    # Startup
    seed_demo_data: bool = False

    # Offer expiry job
    scheduler_enabled: bool = True
    offer_expiry_check_minutes: int = Field(default=15, ge=1, le=1440)
    offer_default_response_days: int = Field(default=7, ge=1, le=90)

    # Interview slot search
    working_day_start_hour: int = Field(default=9, ge=0, le=23)
    working_day_end_hour: int = Field(default=17, ge=1, le=24)
    lunch_start_hour: int = Field(default=12, ge=0, le=23)
    lunch_end_hour: int = Field(default=13, ge=0, le=23)
    slot_step_minutes: int = Field(default=60, ge=5, le=240)
    slot_search_horizon_days: int = Field(default=7, ge=1, le=60)
    max_suggested_slots: int = Field(default=3, ge=1, le=20)

    # Certificates
    certificate_base_url: str = "https://portal.university.edu"

    cors_origins: list[str] = ["*"]

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
