"""Customer email notifications rendered from jinja2 templates."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from barberbook.core.settings import NotificationSettings, get_notification_settings
from barberbook.models.reservation import ReservationStatus
from barberbook.services.contracts import BookingDetails
from barberbook.services.slot_service import format_slot

logger = logging.getLogger(__name__)

__all__ = [
    "SmtpNotificationGateway",
    "build_cancel_url",
    "get_notification_gateway",
    "render_template",
]

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def build_cancel_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/cancel?token={token}"


def build_confirm_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/confirm?token={token}"


def render_template(name: str, **context: Any) -> str:
    template = _ENV.get_template(name)
    return template.render(**context)


class SmtpNotificationGateway:
    """Sends booking emails over SMTP.

    Delivery is skipped (and logged) when SMTP is not configured. Transport
    errors propagate so the caller can record the failed side effect.
    """

    def __init__(self, settings: NotificationSettings, *, timeout: float = 5) -> None:
        self.settings = settings
        self.timeout = timeout

    def _booking_context(self, booking: BookingDetails) -> dict[str, Any]:
        return {
            "business_name": self.settings.business_name,
            "customer_name": booking.customer_name,
            "date": booking.slot_date.strftime("%A %d/%m/%Y"),
            "time": format_slot(booking.slot_time),
            "cancel_url": build_cancel_url(
                self.settings.public_base_url, booking.cancel_token
            ),
            "confirm_url": (
                build_confirm_url(self.settings.public_base_url, booking.cancel_token)
                if booking.status is ReservationStatus.PENDING
                else None
            ),
        }

    def send_confirmation(self, booking: BookingDetails) -> None:
        if booking.status is ReservationStatus.PENDING:
            subject = f"Please confirm your booking at {self.settings.business_name}"
        else:
            subject = f"Booking confirmed at {self.settings.business_name}"
        html = render_template(
            "reservation_confirmation.html", **self._booking_context(booking)
        )
        self._deliver_email(booking.customer_email, subject, html)

    def send_cancellation(self, booking: BookingDetails, reason: str) -> None:
        subject = f"Booking cancelled at {self.settings.business_name}"
        html = render_template(
            "reservation_cancellation.html",
            reason=reason,
            **self._booking_context(booking),
        )
        self._deliver_email(booking.customer_email, subject, html)

    def send_reschedule(
        self, previous: BookingDetails, booking: BookingDetails
    ) -> None:
        subject = f"Booking moved at {self.settings.business_name}"
        html = render_template(
            "reservation_rescheduled.html",
            previous_date=previous.slot_date.strftime("%A %d/%m/%Y"),
            previous_time=format_slot(previous.slot_time),
            **self._booking_context(booking),
        )
        self._deliver_email(booking.customer_email, subject, html)

    def _deliver_email(self, to_email: str, subject: str, html_body: str) -> bool:
        """Attempt to deliver an email immediately.

        Returns True if a send was attempted (and succeeded), False if skipped due to
        missing SMTP configuration. Raises on transport errors.
        """
        settings = self.settings
        if not settings.enabled:
            logger.info("SMTP configuration missing; skipping email to %s", to_email)
            return False

        message = EmailMessage()
        message["Subject"] = subject
        message["To"] = to_email
        message["From"] = (
            settings.smtp_from or settings.smtp_username or "no-reply@barberbook.local"
        )
        message.set_content("This message contains HTML content.")
        message.add_alternative(html_body, subtype="html")

        assert settings.smtp_host is not None and settings.smtp_port is not None
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=self.timeout
        ) as server:
            if settings.smtp_username and settings.smtp_password:
                try:
                    server.starttls()
                except smtplib.SMTPException:
                    logger.debug("SMTP server does not support STARTTLS")
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(message)
        logger.info("Sent email %r to %s", subject, to_email)
        return True


@lru_cache
def get_notification_gateway() -> SmtpNotificationGateway:
    """Return the process-wide email gateway."""
    return SmtpNotificationGateway(get_notification_settings())
