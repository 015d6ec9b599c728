"""Admin reservation endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.api import deps
from barberbook.models.admin_user import AdminUser
from barberbook.models.reservation import ReservationStatus
from barberbook.schemas.reservation import (
    AdminCancelRequest,
    AdminRescheduleRequest,
    BookingReceipt,
    ReservationRead,
    TransitionResponse,
)
from barberbook.services.reservation_workflow import ReservationWorkflow
from barberbook.services.slot_service import parse_slot

from .reservations import build_receipt, build_transition, record_audit

router = APIRouter()


@router.get(
    "",
    response_model=list[ReservationRead],
    summary="List reservations for a date",
)
async def list_reservations_for_date(
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
    day: date = Query(alias="date"),
    status_filter: list[ReservationStatus] | None = Query(default=None, alias="status"),
) -> list[ReservationRead]:
    reservations = await workflow.list_for_date(day, statuses=status_filter)
    return [ReservationRead.from_model(reservation) for reservation in reservations]


@router.get(
    "/calendar",
    response_model=list[ReservationRead],
    summary="List reservations across a date range",
)
async def list_reservations_for_range(
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
    start: date = Query(),
    end: date = Query(),
    status_filter: list[ReservationStatus] | None = Query(default=None, alias="status"),
) -> list[ReservationRead]:
    reservations = await workflow.list_for_range(start, end, statuses=status_filter)
    return [ReservationRead.from_model(reservation) for reservation in reservations]


@router.get(
    "/{reservation_id}",
    response_model=ReservationRead,
    summary="Get reservation",
)
async def get_reservation(
    reservation_id: uuid.UUID,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
) -> ReservationRead:
    reservation = await workflow.get_by_id(reservation_id)
    return ReservationRead.from_model(reservation)


@router.post(
    "/{reservation_id}/cancel",
    response_model=TransitionResponse,
    summary="Cancel reservation",
)
async def cancel_reservation(
    reservation_id: uuid.UUID,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
    request: Request,
    payload: AdminCancelRequest | None = None,
) -> TransitionResponse:
    reason = payload.reason if payload is not None else None
    result = await workflow.cancel(reservation_id, reason, by_token=False)
    response = build_transition(result)
    await record_audit(
        session,
        response.warnings,
        event_type="reservation.cancelled",
        actor=admin.email,
        reservation_id=reservation_id,
        description="Cancelled by admin",
        payload={"reason": result.reservation.cancellation_reason},
        ip_address=deps.client_ip(request),
    )
    return response


@router.post(
    "/{reservation_id}/reschedule",
    response_model=BookingReceipt,
    summary="Reschedule reservation",
)
async def reschedule_reservation(
    reservation_id: uuid.UUID,
    payload: AdminRescheduleRequest,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
    request: Request,
) -> BookingReceipt:
    result = await workflow.reschedule(
        reservation_id, payload.date, parse_slot(payload.time), by_token=False
    )
    receipt = build_receipt(result)
    await record_audit(
        session,
        receipt.warnings,
        event_type="reservation.rescheduled",
        actor=admin.email,
        reservation_id=result.reservation.id,
        description="Rescheduled by admin",
        payload={"previous_id": str(reservation_id)},
        ip_address=deps.client_ip(request),
    )
    return receipt
