"""SQLAlchemy-backed reservation store."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

from sqlalchemy import Select, func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.core.errors import DependencyUnavailable, SlotTaken
from barberbook.models.reservation import (
    ACTIVE_RESERVATION_STATUSES,
    Reservation,
    ReservationStatus,
)

logger = logging.getLogger(__name__)


class SqlReservationStore:
    """Reservation persistence bound to one request-scoped session.

    The partial unique index on active ``(slot_date, slot_time)`` pairs is what
    makes :meth:`create_if_slot_free` and :meth:`replace` atomic claims.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self) -> AsyncIterator[None]:
        try:
            yield
        except OperationalError as exc:
            await self.session.rollback()
            logger.exception("Reservation store unavailable")
            raise DependencyUnavailable("Reservation store unavailable") from exc

    async def find_by_date_range(
        self,
        start: date,
        end: date,
        *,
        statuses: Sequence[ReservationStatus] | None = None,
    ) -> list[Reservation]:
        stmt: Select[tuple[Reservation]] = (
            select(Reservation)
            .where(Reservation.slot_date >= start, Reservation.slot_date <= end)
            .order_by(Reservation.slot_date.asc(), Reservation.slot_time.asc())
            .execution_options(populate_existing=True)
        )
        if statuses is not None:
            stmt = stmt.where(Reservation.status.in_(list(statuses)))
        async with self._guard():
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_email_and_date(
        self, email: str, day: date, *, exclude_id: uuid.UUID | None = None
    ) -> list[Reservation]:
        """Return the customer's active reservations on ``day``."""
        stmt: Select[tuple[Reservation]] = select(Reservation).where(
            Reservation.customer_email == email.lower(),
            Reservation.slot_date == day,
            Reservation.status.in_(list(ACTIVE_RESERVATION_STATUSES)),
        )
        if exclude_id is not None:
            stmt = stmt.where(Reservation.id != exclude_id)
        async with self._guard():
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_token(self, token: str) -> Reservation | None:
        async with self._guard():
            result = await self.session.execute(
                select(Reservation)
                .where(Reservation.cancel_token == token)
                .execution_options(populate_existing=True)
            )
        return result.scalar_one_or_none()

    async def find_by_id(self, reservation_id: uuid.UUID) -> Reservation | None:
        async with self._guard():
            return await self.session.get(
                Reservation, reservation_id, populate_existing=True
            )

    async def count_active_on(
        self, day: date, *, exclude_id: uuid.UUID | None = None
    ) -> int:
        stmt = select(func.count(Reservation.id)).where(
            Reservation.slot_date == day,
            Reservation.status.in_(list(ACTIVE_RESERVATION_STATUSES)),
        )
        if exclude_id is not None:
            stmt = stmt.where(Reservation.id != exclude_id)
        async with self._guard():
            result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def create_if_slot_free(self, reservation: Reservation) -> Reservation:
        """Insert ``reservation`` or raise :class:`SlotTaken` if the slot is held."""
        self.session.add(reservation)
        async with self._guard():
            try:
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                raise SlotTaken() from exc
        await self.session.refresh(reservation)
        return reservation

    async def update(
        self,
        reservation_id: uuid.UUID,
        values: Mapping[str, Any],
        *,
        only_if_status: Sequence[ReservationStatus] | None = None,
    ) -> Reservation | None:
        """Apply ``values``; with ``only_if_status`` the write is conditional.

        Returns ``None`` when no row matched.
        """
        stmt = (
            update(Reservation)
            .where(Reservation.id == reservation_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if only_if_status is not None:
            stmt = stmt.where(Reservation.status.in_(list(only_if_status)))
        async with self._guard():
            try:
                result = await self.session.execute(stmt)
            except IntegrityError as exc:
                await self.session.rollback()
                raise SlotTaken() from exc
            if result.rowcount == 0:
                await self.session.rollback()
                return None
            await self.session.commit()
        return await self._reload(reservation_id)

    async def replace(
        self,
        old_id: uuid.UUID,
        old_values: Mapping[str, Any],
        new_reservation: Reservation,
    ) -> Reservation | None:
        """Retire an active reservation and insert its successor in one transaction.

        Returns ``None`` if the old reservation was no longer active and raises
        :class:`SlotTaken` if the successor's slot is held.
        """
        stmt = (
            update(Reservation)
            .where(
                Reservation.id == old_id,
                Reservation.status.in_(list(ACTIVE_RESERVATION_STATUSES)),
            )
            .values(**old_values)
            .execution_options(synchronize_session=False)
        )
        async with self._guard():
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                return None
            self.session.add(new_reservation)
            try:
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                raise SlotTaken() from exc
        await self.session.refresh(new_reservation)
        return new_reservation

    async def delete(self, reservation_id: uuid.UUID) -> None:
        async with self._guard():
            reservation = await self.session.get(Reservation, reservation_id)
            if reservation is None:
                return
            await self.session.delete(reservation)
            await self.session.commit()

    async def _reload(self, reservation_id: uuid.UUID) -> Reservation | None:
        async with self._guard():
            result = await self.session.execute(
                select(Reservation)
                .where(Reservation.id == reservation_id)
                .execution_options(populate_existing=True)
            )
        return result.scalar_one_or_none()
