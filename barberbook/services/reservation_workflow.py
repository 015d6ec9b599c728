"""Reservation lifecycle: create, confirm, cancel and reschedule."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time

from email_validator import EmailNotValidError, validate_email

from barberbook.core.errors import (
    AlreadyFinalized,
    CustomerLimitExceeded,
    DayLimitExceeded,
    DependencyUnavailable,
    NotFound,
    SlotTaken,
    ValidationError,
)
from barberbook.core.security import generate_cancel_token
from barberbook.core.settings import AvailabilityConfig
from barberbook.models.reservation import (
    ACTIVE_RESERVATION_STATUSES,
    Reservation,
    ReservationStatus,
)
from barberbook.services.availability_service import AvailabilityService
from barberbook.services.contracts import (
    BookingDetails,
    CalendarMirror,
    NotificationGateway,
    ReservationStore,
)
from barberbook.services.side_effects import (
    SideEffectOutcome,
    best_effort,
    call_with_timeout,
)
from barberbook.services.slot_service import format_slot

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "No reason given"
MAX_NAME_LENGTH = 120
MAX_REASON_LENGTH = 500
MAX_CALENDAR_RANGE_DAYS = 62


@dataclass(slots=True, frozen=True)
class WorkflowResult:
    """Committed reservation plus the outcome of each best-effort follow-up."""

    reservation: Reservation
    side_effects: tuple[SideEffectOutcome, ...] = ()
    previous_id: uuid.UUID | None = None

    @property
    def side_effects_ok(self) -> bool:
        return all(outcome.succeeded for outcome in self.side_effects)


class ReservationWorkflow:
    """Orchestrates reservation state changes and their external side effects.

    Every transition is committed to the store before any calendar or email
    call is made. Those calls are bounded by a timeout and reported in the
    :class:`WorkflowResult` instead of failing the operation, except for
    calendar event creation when ``calendar_sync_required`` is set: then a
    failure undoes the transition and raises :class:`DependencyUnavailable`.
    """

    def __init__(
        self,
        config: AvailabilityConfig,
        store: ReservationStore,
        availability: AvailabilityService,
        notifier: NotificationGateway,
        calendar: CalendarMirror | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.availability = availability
        self.notifier = notifier
        self.calendar = calendar
        self._clock = clock or (lambda: datetime.now(config.tzinfo))

    # queries

    async def get_by_token(self, token: str) -> Reservation:
        return await self._load(token, by_token=True)

    async def get_by_id(self, reservation_id: uuid.UUID | str) -> Reservation:
        return await self._load(reservation_id, by_token=False)

    async def list_for_date(
        self,
        day: date,
        *,
        statuses: Sequence[ReservationStatus] | None = None,
    ) -> list[Reservation]:
        """Return every reservation on ``day`` ordered by slot time."""
        return await self.store.find_by_date_range(day, day, statuses=statuses)

    async def list_for_range(
        self,
        start: date,
        end: date,
        *,
        statuses: Sequence[ReservationStatus] | None = None,
    ) -> list[Reservation]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        if (end - start).days > MAX_CALENDAR_RANGE_DAYS:
            raise ValidationError(
                f"Date range may span at most {MAX_CALENDAR_RANGE_DAYS} days"
            )
        return await self.store.find_by_date_range(start, end, statuses=statuses)

    # transitions

    async def create(
        self,
        *,
        customer_name: str,
        customer_email: str,
        day: date,
        slot: time,
    ) -> WorkflowResult:
        name = self._clean_name(customer_name)
        email = self._clean_email(customer_email)
        self._ensure_not_past(day, slot)
        await self._ensure_slot_offered(day, slot)
        await self._ensure_customer_quota(email, day)

        status = (
            ReservationStatus.PENDING
            if self.config.require_confirmation
            else ReservationStatus.CONFIRMED
        )
        reservation = await self.store.create_if_slot_free(
            Reservation(
                id=uuid.uuid4(),
                customer_name=name,
                customer_email=email,
                slot_date=day,
                slot_time=slot,
                status=status,
                cancel_token=generate_cancel_token(),
            )
        )
        logger.info(
            "Reservation %s created for %s %s (%s)",
            reservation.id,
            day.isoformat(),
            format_slot(slot),
            status.value,
        )

        effects: list[SideEffectOutcome] = []
        if self.calendar is not None:
            outcome, event_ref = await self._mirror_create(reservation)
            if not outcome.succeeded and self.config.calendar_sync_required:
                await self.store.delete(reservation.id)
                logger.warning(
                    "Reservation %s rolled back after calendar failure",
                    reservation.id,
                )
                raise DependencyUnavailable(
                    "Calendar is unavailable; the reservation was not kept"
                )
            effects.append(outcome)
            if event_ref:
                reservation = await self._attach_event(reservation, event_ref)

        effects.append(
            await best_effort(
                "notification.confirmation",
                self.notifier.send_confirmation,
                BookingDetails.from_reservation(reservation),
                timeout=self.config.side_effect_timeout_seconds,
            )
        )
        return WorkflowResult(reservation=reservation, side_effects=tuple(effects))

    async def confirm(self, token: str) -> WorkflowResult:
        """Move a pending reservation to confirmed; confirming twice is a no-op."""
        reservation = await self._load(token, by_token=True)
        if reservation.status is ReservationStatus.CONFIRMED:
            return WorkflowResult(reservation=reservation)
        if reservation.status.is_terminal:
            raise AlreadyFinalized()
        updated = await self.store.update(
            reservation.id,
            {"status": ReservationStatus.CONFIRMED},
            only_if_status=[ReservationStatus.PENDING],
        )
        if updated is None:
            raise AlreadyFinalized()
        logger.info("Reservation %s confirmed", updated.id)
        return WorkflowResult(reservation=updated)

    async def cancel(
        self,
        identifier: uuid.UUID | str,
        reason: str | None = None,
        *,
        by_token: bool,
    ) -> WorkflowResult:
        """Cancel by cancel token (customer) or by id (admin)."""
        reservation = await self._load(identifier, by_token=by_token)
        if reservation.status.is_terminal:
            raise AlreadyFinalized()

        reason_text = (reason or "").strip()[:MAX_REASON_LENGTH]
        reason_text = reason_text or DEFAULT_CANCELLATION_REASON
        updated = await self.store.update(
            reservation.id,
            {
                "status": ReservationStatus.CANCELLED,
                "cancellation_reason": reason_text,
            },
            only_if_status=list(ACTIVE_RESERVATION_STATUSES),
        )
        if updated is None:
            # lost a race with another cancel or reschedule
            raise AlreadyFinalized()
        logger.info("Reservation %s cancelled", updated.id)

        effects: list[SideEffectOutcome] = []
        if self.calendar is not None and updated.external_event_ref:
            effects.append(
                await best_effort(
                    "calendar.delete_event",
                    self.calendar.delete_event,
                    updated.external_event_ref,
                    timeout=self.config.side_effect_timeout_seconds,
                )
            )
        effects.append(
            await best_effort(
                "notification.cancellation",
                self.notifier.send_cancellation,
                BookingDetails.from_reservation(updated),
                reason_text,
                timeout=self.config.side_effect_timeout_seconds,
            )
        )
        return WorkflowResult(reservation=updated, side_effects=tuple(effects))

    async def reschedule(
        self,
        identifier: uuid.UUID | str,
        new_day: date,
        new_slot: time,
        *,
        by_token: bool,
    ) -> WorkflowResult:
        """Move a booking to a new slot.

        The original record becomes ``RESCHEDULED`` and a successor record with
        a fresh id and cancel token takes the new slot, in one transaction.
        """
        current = await self._load(identifier, by_token=by_token)
        if current.status.is_terminal:
            raise AlreadyFinalized()

        self._ensure_not_past(new_day, new_slot)
        await self._ensure_slot_offered(
            new_day, new_slot, exclude_reservation_id=current.id
        )
        await self._ensure_customer_quota(
            current.customer_email, new_day, exclude_reservation_id=current.id
        )

        previous = BookingDetails.from_reservation(current)
        successor = await self.store.replace(
            current.id,
            {"status": ReservationStatus.RESCHEDULED},
            Reservation(
                id=uuid.uuid4(),
                customer_name=previous.customer_name,
                customer_email=previous.customer_email,
                slot_date=new_day,
                slot_time=new_slot,
                status=ReservationStatus.CONFIRMED,
                cancel_token=generate_cancel_token(),
                rescheduled_from_id=previous.id,
            ),
        )
        if successor is None:
            raise AlreadyFinalized()
        logger.info(
            "Reservation %s rescheduled to %s as %s",
            previous.id,
            f"{new_day.isoformat()} {format_slot(new_slot)}",
            successor.id,
        )

        effects: list[SideEffectOutcome] = []
        if self.calendar is not None:
            outcome, event_ref = await self._mirror_create(successor)
            if not outcome.succeeded and self.config.calendar_sync_required:
                await self._undo_reschedule(previous, successor.id)
                raise DependencyUnavailable(
                    "Calendar is unavailable; the reservation was not moved"
                )
            effects.append(outcome)
            if event_ref:
                successor = await self._attach_event(successor, event_ref)
            if previous.external_event_ref:
                effects.append(
                    await best_effort(
                        "calendar.delete_event",
                        self.calendar.delete_event,
                        previous.external_event_ref,
                        timeout=self.config.side_effect_timeout_seconds,
                    )
                )

        effects.append(
            await best_effort(
                "notification.reschedule",
                self.notifier.send_reschedule,
                previous,
                BookingDetails.from_reservation(successor),
                timeout=self.config.side_effect_timeout_seconds,
            )
        )
        return WorkflowResult(
            reservation=successor,
            side_effects=tuple(effects),
            previous_id=previous.id,
        )

    # helpers

    def today(self) -> date:
        return self._clock().date()

    async def _load(
        self, identifier: uuid.UUID | str, *, by_token: bool
    ) -> Reservation:
        if by_token:
            token = str(identifier).strip()
            reservation = await self.store.find_by_token(token) if token else None
        else:
            try:
                reservation_id = (
                    identifier
                    if isinstance(identifier, uuid.UUID)
                    else uuid.UUID(str(identifier))
                )
            except ValueError as exc:
                raise NotFound() from exc
            reservation = await self.store.find_by_id(reservation_id)
        if reservation is None:
            raise NotFound()
        return reservation

    @staticmethod
    def _clean_name(value: str) -> str:
        name = (value or "").strip()
        if not name:
            raise ValidationError("Customer name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Customer name must be at most {MAX_NAME_LENGTH} characters"
            )
        return name

    @staticmethod
    def _clean_email(value: str) -> str:
        try:
            result = validate_email((value or "").strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError(f"Invalid email address: {exc}") from exc
        return result.normalized.lower()

    def _ensure_not_past(self, day: date, slot: time) -> None:
        now = self._clock()
        if day < now.date():
            raise ValidationError("Cannot book a date in the past")
        if day == now.date() and slot <= now.time():
            raise ValidationError("Cannot book a time that has already passed")

    async def _ensure_slot_offered(
        self,
        day: date,
        slot: time,
        *,
        exclude_reservation_id: uuid.UUID | None = None,
    ) -> None:
        if not self.availability.is_open(day):
            raise ValidationError(f"No bookings are taken on {day.isoformat()}")
        if slot not in self.availability.grid(day):
            raise ValidationError(f"{format_slot(slot)} is not a bookable time")
        remaining = await self.availability.remaining_capacity(
            day, exclude_reservation_id=exclude_reservation_id
        )
        if remaining <= 0:
            raise DayLimitExceeded()
        free = await self.availability.free_slots(
            day, exclude_reservation_id=exclude_reservation_id
        )
        if slot not in free:
            raise SlotTaken()

    async def _ensure_customer_quota(
        self,
        email: str,
        day: date,
        *,
        exclude_reservation_id: uuid.UUID | None = None,
    ) -> None:
        existing = await self.store.find_by_email_and_date(
            email, day, exclude_id=exclude_reservation_id
        )
        if len(existing) >= self.config.max_reservations_per_customer_per_day:
            raise CustomerLimitExceeded()

    async def _mirror_create(
        self, reservation: Reservation
    ) -> tuple[SideEffectOutcome, str | None]:
        assert self.calendar is not None
        timeout = self.config.side_effect_timeout_seconds
        try:
            event_ref = await call_with_timeout(
                self.calendar.create_event,
                BookingDetails.from_reservation(reservation),
                timeout=timeout,
            )
        except TimeoutError:
            logger.warning("Calendar event creation timed out after %.1fs", timeout)
            return SideEffectOutcome("calendar.create_event", False, "timeout"), None
        except Exception as exc:
            logger.exception("Calendar event creation failed for %s", reservation.id)
            return (
                SideEffectOutcome("calendar.create_event", False, str(exc) or None),
                None,
            )
        return SideEffectOutcome("calendar.create_event", True), event_ref

    async def _attach_event(
        self, reservation: Reservation, event_ref: str
    ) -> Reservation:
        updated = await self.store.update(
            reservation.id, {"external_event_ref": event_ref}
        )
        return updated or reservation

    async def _undo_reschedule(
        self, previous: BookingDetails, successor_id: uuid.UUID
    ) -> None:
        await self.store.delete(successor_id)
        try:
            restored = await self.store.update(
                previous.id,
                {"status": previous.status},
                only_if_status=[ReservationStatus.RESCHEDULED],
            )
        except SlotTaken:
            restored = None
        if restored is None:
            logger.error(
                "Could not restore reservation %s after failed reschedule",
                previous.id,
            )
        else:
            logger.warning(
                "Reschedule of %s rolled back after calendar failure", previous.id
            )

