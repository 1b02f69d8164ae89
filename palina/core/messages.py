"""
WhatsApp message templates.

Plain functions of a booking, so they can be rendered and tested
without a provider.
"""
from typing import Optional

from palina.core.config import settings
from palina.models import Booking, BookingStatus, BookingType


def _money(value) -> str:
    return f"${value}"


def _type_label(booking: Booking) -> str:
    return "🏠 Cabin Stay" if booking.booking_type == BookingType.CABIN else "🏊 Day Pass"


def format_admin_new_booking(booking: Booking) -> str:
    """Alert for the resort admin about a fresh booking request"""
    if booking.booking_type == BookingType.CABIN:
        date_info = (
            f"Check-in: {booking.check_in_date}\nCheck-out: {booking.check_out_date}"
        )
    else:
        date_info = f"Visit Date: {booking.visit_date}"

    lines = [
        f"🔔 *NEW BOOKING - {settings.resort_name}*",
        "",
        _type_label(booking),
        "",
        f"👤 *Guest:* {booking.guest_name}",
        f"📞 *Phone:* {booking.guest_phone}",
    ]
    if booking.guest_email:
        lines.append(f"📧 *Email:* {booking.guest_email}")
    lines += [
        "",
        f"📅 {date_info}",
        f"👥 *Guests:* {booking.number_of_guests}",
        f"💰 *Total:* {_money(booking.total_price)}",
    ]
    if booking.special_requests:
        lines += ["", f"📝 *Notes:* {booking.special_requests}"]
    lines += ["", f"Reply with booking ID #{booking.id} to manage this booking."]
    return "\n".join(lines)


def format_guest_booking_received(booking: Booking) -> str:
    """Receipt for the guest right after the booking form was submitted"""
    if booking.booking_type == BookingType.CABIN:
        kind = "cabin reservation"
        when = f"Check-in: {booking.check_in_date}"
    else:
        kind = "day pass booking"
        when = f"Visit: {booking.visit_date}"

    return (
        f"🌴 *Thank you for booking with {settings.resort_name}!*\n\n"
        f"Hi {booking.guest_name},\n\n"
        f"We have received your {kind} request.\n\n"
        "📋 *Booking Details:*\n"
        f"• Reference: #{booking.id}\n"
        f"• {when}\n"
        f"• Guests: {booking.number_of_guests}\n"
        f"• Total: {_money(booking.total_price)}\n\n"
        "We will contact you shortly to confirm your booking and payment details.\n\n"
        f"📍 {settings.resort_name}, {settings.resort_location}\n"
        f"📱 Follow us: {settings.instagram_handle}"
    )


def format_guest_status_update(booking: Booking, status) -> Optional[str]:
    """
    Guest message for a status change.

    Returns None for statuses that have no guest message (pending and
    anything unrecognized).
    """
    try:
        status = BookingStatus(getattr(status, "value", status))
    except ValueError:
        return None

    if status == BookingStatus.CONFIRMED:
        return (
            "✅ *Booking Confirmed!*\n\n"
            f"Hi {booking.guest_name},\n\n"
            f"Great news! Your booking #{booking.id} at {settings.resort_name} "
            "has been confirmed.\n\n"
            "We look forward to welcoming you!\n\n"
            f"📍 {settings.resort_name}, {settings.resort_location}"
        )
    if status == BookingStatus.CANCELLED:
        return (
            "❌ *Booking Cancelled*\n\n"
            f"Hi {booking.guest_name},\n\n"
            f"Your booking #{booking.id} at {settings.resort_name} has been cancelled.\n\n"
            "If you have any questions, please contact us.\n\n"
            f"📍 {settings.resort_name}, {settings.resort_location}"
        )
    if status == BookingStatus.COMPLETED:
        return (
            "🎉 *Thank you for visiting!*\n\n"
            f"Hi {booking.guest_name},\n\n"
            f"We hope you enjoyed your time at {settings.resort_name}!\n\n"
            f"Please leave us a review on Instagram {settings.instagram_handle}\n\n"
            "See you again soon! 🌴"
        )
    return None
