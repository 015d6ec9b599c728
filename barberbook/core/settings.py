"""Specialized settings adapters for booking rules and integrations."""

from __future__ import annotations

from datetime import date, time
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from barberbook.core.config import get_settings


class AvailabilityConfig(BaseModel):
    """Read-only view of the booking rules that drive slot availability."""

    model_config = ConfigDict(frozen=True)

    work_days: frozenset[int] = Field(default=frozenset({1, 2, 3, 4, 5, 6}))
    holidays: frozenset[date] = Field(default=frozenset())
    work_start: time = time(9, 0)
    work_end: time = time(18, 0)
    slot_duration_minutes: int = 30
    max_reservations_per_day: int = 12
    max_reservations_per_customer_per_day: int = 2
    timezone: str = "America/Montevideo"
    require_confirmation: bool = False
    calendar_busy_source: bool = True
    calendar_sync_required: bool = False
    side_effect_timeout_seconds: float = 10.0

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class NotificationSettings(BaseModel):
    """Slim view of outbound email configuration."""

    business_name: str
    public_base_url: str
    smtp_host: str | None = None
    smtp_port: int | None = None
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_port)


class CalendarSettings(BaseModel):
    """Slim view of the external calendar configuration."""

    calendar_id: str | None = None
    service_account_file: str | None = None
    timezone: str = "America/Montevideo"
    event_minutes: int = 30
    business_name: str = "Barberbook"

    @property
    def enabled(self) -> bool:
        return bool(self.calendar_id and self.service_account_file)


@lru_cache
def get_availability_config() -> AvailabilityConfig:
    """Return the booking rules, built once per process."""

    settings = get_settings()
    return AvailabilityConfig(
        work_days=frozenset(settings.work_days),
        holidays=frozenset(settings.holidays),
        work_start=settings.work_start,
        work_end=settings.work_end,
        slot_duration_minutes=settings.slot_minutes,
        max_reservations_per_day=settings.max_reservations_per_day,
        max_reservations_per_customer_per_day=(
            settings.max_reservations_per_customer_per_day
        ),
        timezone=settings.business_timezone,
        require_confirmation=settings.require_confirmation,
        calendar_busy_source=settings.calendar_busy_source,
        calendar_sync_required=settings.calendar_sync_required,
        side_effect_timeout_seconds=settings.side_effect_timeout_seconds,
    )


def get_notification_settings() -> NotificationSettings:
    """Return email-specific configuration."""

    settings = get_settings()
    return NotificationSettings(
        business_name=settings.business_name,
        public_base_url=settings.public_base_url.rstrip("/"),
        smtp_host=settings.smtp_host or None,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username or None,
        smtp_password=settings.smtp_password or None,
        smtp_from=settings.smtp_from or None,
    )


def get_calendar_settings() -> CalendarSettings:
    """Return calendar-specific configuration."""

    settings = get_settings()
    return CalendarSettings(
        calendar_id=settings.google_calendar_id or None,
        service_account_file=settings.google_service_account_file or None,
        timezone=settings.business_timezone,
        event_minutes=settings.calendar_event_minutes or settings.slot_minutes,
        business_name=settings.business_name,
    )
