"""Test fixtures for the booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("PUBLIC_BASE_URL", "https://book.example.com")

from barberbook.api import deps
from barberbook.core.config import get_settings
from barberbook.core.security import get_password_hash
from barberbook.core.settings import AvailabilityConfig
from barberbook.db.base import Base
from barberbook.db.session import dispose_engine, get_sessionmaker
from barberbook.main import app
from barberbook.models import AdminUser, Reservation, ReservationStatus
from barberbook.services.availability_service import AvailabilityService
from barberbook.services.contracts import BookingDetails, BusyInterval
from barberbook.services.occupancy_service import OccupancyResolver
from barberbook.services.reservation_store import SqlReservationStore
from barberbook.services.reservation_workflow import ReservationWorkflow

BUSINESS_TZ = ZoneInfo("America/Montevideo")
# Sunday 2025-06-01 08:00 local; 2025-06-02 is the following Monday
FIXED_NOW = datetime(2025, 6, 1, 8, 0, tzinfo=BUSINESS_TZ)
MONDAY = date(2025, 6, 2)
TUESDAY = date(2025, 6, 3)
SUNDAY = date(2025, 6, 8)


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeCalendar:
    """In-memory calendar mirror with switchable failures."""

    def __init__(self) -> None:
        self.busy: dict[date, list[BusyInterval]] = {}
        self.events: dict[str, BookingDetails] = {}
        self.deleted: list[str] = []
        self.fail_list = False
        self.fail_create = False
        self.fail_delete = False
        self._counter = 0

    def list_busy_intervals(self, day: date) -> list[BusyInterval]:
        if self.fail_list:
            raise RuntimeError("calendar unreachable")
        return list(self.busy.get(day, []))

    def create_event(self, booking: BookingDetails) -> str:
        if self.fail_create:
            raise RuntimeError("calendar rejected event")
        self._counter += 1
        ref = f"evt-{self._counter}"
        self.events[ref] = booking
        return ref

    def delete_event(self, event_ref: str) -> None:
        if self.fail_delete:
            raise RuntimeError("calendar rejected delete")
        self.deleted.append(event_ref)
        self.events.pop(event_ref, None)


class FakeNotifier:
    """Records notifications instead of sending email."""

    def __init__(self) -> None:
        self.confirmations: list[BookingDetails] = []
        self.cancellations: list[tuple[BookingDetails, str]] = []
        self.reschedules: list[tuple[BookingDetails, BookingDetails]] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RuntimeError("smtp down")

    def send_confirmation(self, booking: BookingDetails) -> None:
        self._check()
        self.confirmations.append(booking)

    def send_cancellation(self, booking: BookingDetails, reason: str) -> None:
        self._check()
        self.cancellations.append((booking, reason))

    def send_reschedule(
        self, previous: BookingDetails, booking: BookingDetails
    ) -> None:
        self._check()
        self.reschedules.append((previous, booking))


def make_config(**overrides: object) -> AvailabilityConfig:
    values: dict[str, object] = {
        "work_days": frozenset({1, 2, 3, 4, 5, 6}),
        "holidays": frozenset(),
        "work_start": time(9, 0),
        "work_end": time(11, 0),
        "slot_duration_minutes": 30,
        "max_reservations_per_day": 12,
        "max_reservations_per_customer_per_day": 2,
        "timezone": "America/Montevideo",
        "side_effect_timeout_seconds": 2.0,
    }
    values.update(overrides)
    return AvailabilityConfig(**values)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def session(reset_database: None, db_url: str) -> AsyncIterator[AsyncSession]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as db_session:
        yield db_session


@pytest.fixture()
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


WorkflowFactory = Callable[..., ReservationWorkflow]


@pytest.fixture()
def make_workflow(notifier: FakeNotifier) -> WorkflowFactory:
    """Build a workflow over a session with the fixed clock."""

    def _factory(
        db_session: AsyncSession,
        *,
        config: AvailabilityConfig | None = None,
        calendar: FakeCalendar | None = None,
    ) -> ReservationWorkflow:
        cfg = config or make_config()
        store = SqlReservationStore(db_session)
        availability = AvailabilityService(
            cfg, store, OccupancyResolver(cfg, store, calendar)
        )
        return ReservationWorkflow(
            cfg, store, availability, notifier, calendar=calendar, clock=fixed_clock
        )

    return _factory


async def seed_reservation(
    db_session: AsyncSession,
    *,
    day: date,
    slot: time,
    email: str = "seed@example.com",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    token: str | None = None,
) -> Reservation:
    reservation = Reservation(
        customer_name="Seeded Customer",
        customer_email=email,
        slot_date=day,
        slot_time=slot,
        status=status,
        cancel_token=token
        or f"seed-{day.isoformat()}-{slot.strftime('%H%M')}-{status.value}",
    )
    db_session.add(reservation)
    await db_session.commit()
    await db_session.refresh(reservation)
    return reservation


@pytest_asyncio.fixture()
async def app_context(
    reset_database: None,
    db_url: str,
    notifier: FakeNotifier,
    calendar: FakeCalendar,
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client wired to fakes plus seeded admin credentials."""
    sessionmaker = get_sessionmaker(db_url)
    admin_password = "Sh4rpBlade!"
    async with sessionmaker() as db_session:
        admin = AdminUser(
            email="owner@barber.example.com",
            hashed_password=get_password_hash(admin_password),
            full_name="Shop Owner",
            is_active=True,
        )
        db_session.add(admin)
        await db_session.commit()

    config = make_config()
    app.dependency_overrides[deps.get_config] = lambda: config
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    app.dependency_overrides[deps.get_calendar] = lambda: calendar
    app.dependency_overrides[deps.get_clock] = lambda: fixed_clock

    context: dict[str, object] = {
        "admin_email": admin.email,
        "admin_password": admin_password,
        "notifier": notifier,
        "calendar": calendar,
        "config": config,
        "sessionmaker": sessionmaker,
    }
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            context["client"] = client
            yield context
    finally:
        app.dependency_overrides.clear()
