"""Notification rendering and delivery."""

from __future__ import annotations

import smtplib
import uuid
from datetime import date, time
from unittest.mock import MagicMock

import pytest

from barberbook.core.settings import NotificationSettings
from barberbook.models import ReservationStatus
from barberbook.services.contracts import BookingDetails
from barberbook.services.notification_service import (
    SmtpNotificationGateway,
    build_cancel_url,
    render_template,
)


def _booking(status: ReservationStatus = ReservationStatus.CONFIRMED) -> BookingDetails:
    return BookingDetails(
        id=uuid.uuid4(),
        customer_name="Carla <b>Gómez</b>",
        customer_email="carla@example.com",
        slot_date=date(2025, 6, 2),
        slot_time=time(10, 30),
        status=status,
        cancel_token="tok-123",
    )


def _settings(**overrides: object) -> NotificationSettings:
    values: dict[str, object] = {
        "business_name": "Corte Fino",
        "public_base_url": "https://book.example.com",
    }
    values.update(overrides)
    return NotificationSettings(**values)


def test_cancel_url_strips_trailing_slash() -> None:
    assert (
        build_cancel_url("https://book.example.com/", "abc")
        == "https://book.example.com/cancel?token=abc"
    )


def test_confirmation_template_escapes_customer_input() -> None:
    html = render_template(
        "reservation_confirmation.html",
        business_name="Corte Fino",
        customer_name="<script>x</script>",
        date="Monday 02/06/2025",
        time="10:30",
        cancel_url="https://book.example.com/cancel?token=t",
        confirm_url=None,
    )
    assert "&lt;script&gt;" in html
    assert "10:30" in html
    assert "https://book.example.com/cancel?token=t" in html


def test_delivery_is_skipped_without_smtp(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock()
    monkeypatch.setattr(smtplib, "SMTP", smtp)
    gateway = SmtpNotificationGateway(_settings())

    gateway.send_confirmation(_booking())

    smtp.assert_not_called()


def test_confirmation_is_sent_over_smtp(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock()
    monkeypatch.setattr(smtplib, "SMTP", smtp)
    gateway = SmtpNotificationGateway(
        _settings(
            smtp_host="smtp.example.com",
            smtp_port=587,
            smtp_username="mailer",
            smtp_password="secret",
            smtp_from="bookings@example.com",
        )
    )

    gateway.send_confirmation(_booking())

    smtp.assert_called_once_with("smtp.example.com", 587, timeout=5)
    server = smtp.return_value.__enter__.return_value
    server.login.assert_called_once_with("mailer", "secret")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "carla@example.com"
    assert message["Subject"] == "Booking confirmed at Corte Fino"
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "https://book.example.com/cancel?token=tok-123" in html
    assert "Carla &lt;b&gt;Gómez&lt;/b&gt;" in html


def test_pending_booking_asks_for_confirmation(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock()
    monkeypatch.setattr(smtplib, "SMTP", smtp)
    gateway = SmtpNotificationGateway(
        _settings(smtp_host="smtp.example.com", smtp_port=25)
    )

    gateway.send_confirmation(_booking(ReservationStatus.PENDING))

    server = smtp.return_value.__enter__.return_value
    server.login.assert_not_called()
    message = server.send_message.call_args.args[0]
    assert message["Subject"].startswith("Please confirm")
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "https://book.example.com/confirm?token=tok-123" in html


def test_transport_errors_propagate(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock(side_effect=smtplib.SMTPConnectError(421, b"busy"))
    monkeypatch.setattr(smtplib, "SMTP", smtp)
    gateway = SmtpNotificationGateway(
        _settings(smtp_host="smtp.example.com", smtp_port=25)
    )

    with pytest.raises(smtplib.SMTPConnectError):
        gateway.send_cancellation(_booking(), "Barber is ill")
