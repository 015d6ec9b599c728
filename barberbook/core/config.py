"""Application configuration via pydantic settings."""

from datetime import date, time
from functools import lru_cache
from pathlib import Path

from typing import Annotated, Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Barberbook API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    secret_key: str = Field("change-me", alias="SECRET_KEY")
    jwt_secret_key: str = Field(default="", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    business_name: str = Field("Barberbook", alias="BUSINESS_NAME")
    business_timezone: str = Field("America/Montevideo", alias="BUSINESS_TIMEZONE")
    work_days: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5, 6], alias="WORK_DAYS"
    )
    holidays: Annotated[list[date], NoDecode] = Field(
        default_factory=list, alias="HOLIDAYS"
    )
    work_start: time = Field(time(9, 0), alias="WORK_START")
    work_end: time = Field(time(18, 0), alias="WORK_END")
    slot_minutes: int = Field(30, alias="SLOT_MINUTES")
    max_reservations_per_day: int = Field(12, alias="MAX_RESERVATIONS_PER_DAY")
    max_reservations_per_customer_per_day: int = Field(
        2, alias="MAX_RESERVATIONS_PER_CUSTOMER_PER_DAY"
    )
    require_confirmation: bool = Field(False, alias="REQUIRE_CONFIRMATION")
    public_base_url: str = Field("http://localhost:8000", alias="PUBLIC_BASE_URL")

    google_calendar_id: str | None = Field(default=None, alias="GOOGLE_CALENDAR_ID")
    google_service_account_file: str | None = Field(
        default=None, alias="GOOGLE_SERVICE_ACCOUNT_FILE"
    )
    calendar_busy_source: bool = Field(True, alias="CALENDAR_BUSY_SOURCE")
    calendar_sync_required: bool = Field(False, alias="CALENDAR_SYNC_REQUIRED")
    calendar_event_minutes: int | None = Field(
        default=None, alias="CALENDAR_EVENT_MINUTES"
    )
    side_effect_timeout_seconds: float = Field(
        10.0, alias="SIDE_EFFECT_TIMEOUT_SECONDS"
    )

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: str | None = Field(default=None, alias="SMTP_FROM")

    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")

    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allowlist: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173"], alias="CORS_ALLOWLIST"
    )

    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_booking: str = Field("10/minute", alias="RATE_LIMIT_BOOKING")
    rate_limit_login: str = Field("10/minute", alias="RATE_LIMIT_LOGIN")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate JWT secret from the generic secret when not provided."""

        if not self.jwt_secret_key:
            object.__setattr__(self, "jwt_secret_key", self.secret_key)

    @field_validator("cors_allowlist", "holidays", mode="before")
    @classmethod
    def _split_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("work_days", mode="before")
    @classmethod
    def _split_days(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [int(item) for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
