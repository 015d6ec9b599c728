"""Public reservation endpoints; the cancel token authorizes customer actions."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.api import deps
from barberbook.api.rate_limit import BOOKING_RATE_DEP, DEFAULT_RATE_DEP
from barberbook.core.settings import get_notification_settings
from barberbook.schemas.reservation import (
    BookingReceipt,
    CancelRequest,
    ConfirmRequest,
    PublicReservationRead,
    ReservationCreate,
    RescheduleRequest,
    TransitionResponse,
)
from barberbook.services import audit_service
from barberbook.services.notification_service import build_cancel_url
from barberbook.services.reservation_workflow import (
    ReservationWorkflow,
    WorkflowResult,
)
from barberbook.services.slot_service import format_slot, parse_slot

logger = logging.getLogger(__name__)

router = APIRouter()


def _warnings(result: WorkflowResult) -> list[str]:
    return [outcome.name for outcome in result.side_effects if not outcome.succeeded]


async def record_audit(
    session: AsyncSession, warnings: list[str], **event: object
) -> None:
    """Write an audit row after a committed transition.

    The booking already stands, so a failed audit write is logged and reported
    as the ``audit.record`` warning instead of failing the request.
    """
    try:
        await audit_service.record_event(session, **event)
    except Exception:
        logger.exception("Audit write failed for %s", event.get("event_type"))
        await session.rollback()
        warnings.append("audit.record")


def build_receipt(result: WorkflowResult) -> BookingReceipt:
    reservation = result.reservation
    return BookingReceipt(
        id=reservation.id,
        status=reservation.status,
        date=reservation.slot_date,
        time=format_slot(reservation.slot_time),
        cancel_token=reservation.cancel_token,
        cancel_url=build_cancel_url(
            get_notification_settings().public_base_url, reservation.cancel_token
        ),
        previous_id=result.previous_id,
        warnings=_warnings(result),
    )


def build_transition(result: WorkflowResult) -> TransitionResponse:
    return TransitionResponse(
        reservation=PublicReservationRead.from_model(result.reservation),
        warnings=_warnings(result),
    )


@router.post(
    "",
    response_model=BookingReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Book a slot",
    dependencies=[BOOKING_RATE_DEP],
)
async def create_reservation(
    payload: ReservationCreate,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> BookingReceipt:
    result = await workflow.create(
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        day=payload.date,
        slot=parse_slot(payload.time),
    )
    receipt = build_receipt(result)
    await record_audit(
        session,
        receipt.warnings,
        event_type="reservation.created",
        actor=result.reservation.customer_email,
        reservation_id=result.reservation.id,
        description="Customer booking",
        payload={"date": payload.date.isoformat(), "time": payload.time},
        ip_address=deps.client_ip(request),
    )
    return receipt


@router.get(
    "/by-token/{token}",
    response_model=PublicReservationRead,
    summary="Look up a booking by its cancel token",
    dependencies=[DEFAULT_RATE_DEP],
)
async def get_reservation_by_token(
    token: str,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
) -> PublicReservationRead:
    reservation = await workflow.get_by_token(token)
    return PublicReservationRead.from_model(reservation)


@router.post(
    "/cancel",
    response_model=TransitionResponse,
    summary="Cancel a booking",
    dependencies=[BOOKING_RATE_DEP],
)
async def cancel_reservation(
    payload: CancelRequest,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> TransitionResponse:
    result = await workflow.cancel(payload.token, payload.reason, by_token=True)
    response = build_transition(result)
    await record_audit(
        session,
        response.warnings,
        event_type="reservation.cancelled",
        actor=result.reservation.customer_email,
        reservation_id=result.reservation.id,
        description="Cancelled by customer",
        payload={"reason": result.reservation.cancellation_reason},
        ip_address=deps.client_ip(request),
    )
    return response


@router.post(
    "/confirm",
    response_model=TransitionResponse,
    summary="Confirm a pending booking",
    dependencies=[BOOKING_RATE_DEP],
)
async def confirm_reservation(
    payload: ConfirmRequest,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> TransitionResponse:
    result = await workflow.confirm(payload.token)
    response = build_transition(result)
    await record_audit(
        session,
        response.warnings,
        event_type="reservation.confirmed",
        actor=result.reservation.customer_email,
        reservation_id=result.reservation.id,
        description="Confirmed by customer",
        ip_address=deps.client_ip(request),
    )
    return response


@router.post(
    "/reschedule",
    response_model=BookingReceipt,
    summary="Move a booking to another slot",
    dependencies=[BOOKING_RATE_DEP],
)
async def reschedule_reservation(
    payload: RescheduleRequest,
    workflow: Annotated[ReservationWorkflow, Depends(deps.get_workflow)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> BookingReceipt:
    result = await workflow.reschedule(
        payload.token, payload.date, parse_slot(payload.time), by_token=True
    )
    receipt = build_receipt(result)
    await record_audit(
        session,
        receipt.warnings,
        event_type="reservation.rescheduled",
        actor=result.reservation.customer_email,
        reservation_id=result.reservation.id,
        description="Rescheduled by customer",
        payload={"previous_id": str(result.previous_id)},
        ip_address=deps.client_ip(request),
    )
    return receipt
