"""Helper utilities for recording audit events."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.models.audit_event import AuditEvent


async def record_event(
    session: AsyncSession,
    *,
    event_type: str,
    actor: str | None = None,
    reservation_id: uuid.UUID | None = None,
    description: str | None = None,
    payload: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> AuditEvent:
    """Persist an audit event and return it."""
    event = AuditEvent(
        event_type=event_type,
        actor=actor,
        reservation_id=reservation_id,
        description=description,
        payload=payload,
        ip_address=ip_address,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


async def list_events_for_reservation(
    session: AsyncSession, *, reservation_id: uuid.UUID
) -> list[AuditEvent]:
    stmt: Select[tuple[AuditEvent]] = (
        select(AuditEvent)
        .where(AuditEvent.reservation_id == reservation_id)
        .order_by(AuditEvent.created_at.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
