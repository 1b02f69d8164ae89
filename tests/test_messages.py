from datetime import date
from decimal import Decimal

from palina.core.messages import (
    format_admin_new_booking,
    format_guest_booking_received,
    format_guest_status_update,
)
from palina.models import Booking, BookingStatus, BookingType


def _booking(**overrides):
    fields = dict(
        id=7,
        guest_name="Ana",
        guest_phone="71234567",
        guest_email=None,
        booking_type=BookingType.CABIN,
        check_in_date=date(2024, 6, 1),
        check_out_date=date(2024, 6, 3),
        visit_date=None,
        number_of_guests=2,
        total_price=Decimal("200.00"),
        special_requests=None,
    )
    fields.update(overrides)
    return Booking(**fields)


def test_admin_message_for_cabin():
    text = format_admin_new_booking(_booking(special_requests="Late arrival"))

    assert text.startswith("🔔 *NEW BOOKING - Palina Resort*")
    assert "Cabin Stay" in text
    assert "Check-in: 2024-06-01" in text
    assert "Check-out: 2024-06-03" in text
    assert "$200.00" in text
    assert "📝 *Notes:* Late arrival" in text
    assert text.endswith("Reply with booking ID #7 to manage this booking.")
    assert "Email" not in text


def test_admin_message_for_day_pass():
    text = format_admin_new_booking(
        _booking(
            booking_type=BookingType.DAY_PASS,
            check_in_date=None,
            check_out_date=None,
            visit_date=date(2024, 6, 10),
            guest_email="ana@example.com",
        )
    )
    assert "Day Pass" in text
    assert "Visit Date: 2024-06-10" in text
    assert "ana@example.com" in text


def test_guest_receipt():
    text = format_guest_booking_received(_booking())

    assert "Thank you for booking with Palina Resort" in text
    assert "cabin reservation" in text
    assert "Reference: #7" in text
    assert "@palina_pool" in text


def test_status_templates():
    booking = _booking()

    assert "Booking Confirmed" in format_guest_status_update(booking, BookingStatus.CONFIRMED)
    assert "Booking Cancelled" in format_guest_status_update(booking, "cancelled")
    assert "Thank you for visiting" in format_guest_status_update(booking, BookingStatus.COMPLETED)


def test_no_template_for_pending_or_unknown():
    booking = _booking()
    assert format_guest_status_update(booking, BookingStatus.PENDING) is None
    assert format_guest_status_update(booking, "archived") is None
