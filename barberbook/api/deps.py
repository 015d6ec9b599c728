"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.core.config import get_settings
from barberbook.core.settings import AvailabilityConfig, get_availability_config
from barberbook.db.session import get_session
from barberbook.integrations.google_calendar import get_calendar_mirror
from barberbook.models.admin_user import AdminUser
from barberbook.services import auth_service
from barberbook.services.availability_service import AvailabilityService
from barberbook.services.contracts import CalendarMirror, NotificationGateway
from barberbook.services.notification_service import get_notification_gateway
from barberbook.services.occupancy_service import OccupancyResolver
from barberbook.services.reservation_store import SqlReservationStore
from barberbook.services.reservation_workflow import ReservationWorkflow

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def get_config() -> AvailabilityConfig:
    return get_availability_config()


def get_calendar() -> CalendarMirror | None:
    return get_calendar_mirror()


def get_notifier() -> NotificationGateway:
    return get_notification_gateway()


def get_clock() -> Callable[[], datetime] | None:
    """Return the wall clock used for past-date checks; None means system time."""
    return None


def get_availability_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    config: Annotated[AvailabilityConfig, Depends(get_config)],
    calendar: Annotated[CalendarMirror | None, Depends(get_calendar)],
) -> AvailabilityService:
    store = SqlReservationStore(session)
    return AvailabilityService(config, store, OccupancyResolver(config, store, calendar))


def get_workflow(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    config: Annotated[AvailabilityConfig, Depends(get_config)],
    availability: Annotated[AvailabilityService, Depends(get_availability_service)],
    notifier: Annotated[NotificationGateway, Depends(get_notifier)],
    calendar: Annotated[CalendarMirror | None, Depends(get_calendar)],
    clock: Annotated[Callable[[], datetime] | None, Depends(get_clock)],
) -> ReservationWorkflow:
    return ReservationWorkflow(
        config,
        availability.store,
        availability,
        notifier,
        calendar=calendar,
        clock=clock,
    )


async def get_current_admin(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AdminUser:
    """Authenticate request via bearer token."""
    return await auth_service.verify(session, token)


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
