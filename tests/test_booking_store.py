from datetime import date
from decimal import Decimal

import pytest

from palina.core.exceptions import BookingNotFoundError, ValidationError
from palina.domain.pricing import cabin_total
from palina.models import BookingStatus, BookingType, NotificationStatus


@pytest.mark.asyncio
async def test_create_then_get_is_pending_and_not_notified(store, cabin_booking_data):
    created = await store.create(cabin_booking_data)
    assert created.id is not None

    booking = await store.get(created.id)
    assert booking.status == BookingStatus.PENDING
    assert booking.whatsapp_notified is False
    assert booking.booking_type == BookingType.CABIN
    assert booking.check_in_date == date(2024, 6, 1)
    assert booking.check_out_date == date(2024, 6, 3)
    assert booking.visit_date is None


@pytest.mark.asyncio
async def test_total_price_stored_as_given(store, cabin_booking_data):
    price = cabin_total(date(2024, 6, 1), date(2024, 6, 4), Decimal("100.00"))
    cabin_booking_data["check_out_date"] = "2024-06-04"
    cabin_booking_data["total_price"] = price

    booking = await store.create(cabin_booking_data)
    assert (await store.get(booking.id)).total_price == Decimal("300.00")

    # The store never recomputes: an odd total stays odd
    cabin_booking_data["total_price"] = "123.45"
    other = await store.create(cabin_booking_data)
    assert (await store.get(other.id)).total_price == Decimal("123.45")


@pytest.mark.asyncio
async def test_day_pass_ignores_cabin_dates(store, day_pass_data):
    day_pass_data["check_in_date"] = "2024-06-10"
    booking = await store.create(day_pass_data)

    assert booking.booking_type == BookingType.DAY_PASS
    assert booking.visit_date == date(2024, 6, 10)
    assert booking.check_in_date is None
    assert booking.guest_email == "karim@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field,value",
    [
        ("guest_name", ""),
        ("guest_phone", "   "),
        ("booking_type", None),
        ("booking_type", "villa"),
        ("check_out_date", None),
        ("check_in_date", "not-a-date"),
        ("number_of_guests", 0),
        ("total_price", -5),
        ("total_price", "NaN"),
        ("total_price", "Infinity"),
        ("total_price", "100000000"),
        ("number_of_guests", 2**63),
    ],
)
async def test_create_rejects_invalid_data(store, cabin_booking_data, field, value):
    cabin_booking_data[field] = value
    with pytest.raises(ValidationError):
        await store.create(cabin_booking_data)

    assert await store.list() == []


@pytest.mark.asyncio
async def test_get_missing_booking(store):
    assert await store.get_or_none(999) is None
    with pytest.raises(BookingNotFoundError):
        await store.get(999)


@pytest.mark.asyncio
async def test_list_filters_and_order(store, cabin_booking_data, day_pass_data):
    first = await store.create(cabin_booking_data)
    second = await store.create(day_pass_data)
    third = await store.create(cabin_booking_data)
    await store.update_status(third.id, "confirmed")

    assert [b.id for b in await store.list()] == [third.id, second.id, first.id]
    assert [b.id for b in await store.list(status="pending")] == [second.id, first.id]
    assert [b.id for b in await store.list(booking_type="day_pass")] == [second.id]
    assert [b.id for b in await store.list(status="confirmed", booking_type="cabin")] == [third.id]

    with pytest.raises(ValidationError):
        await store.list(status="archived")


@pytest.mark.asyncio
async def test_update_status_bumps_updated_at(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    created_at = booking.created_at

    await store.update_status(booking.id, "confirmed", "Paid deposit")
    booking = await store.get(booking.id)

    assert booking.status == BookingStatus.CONFIRMED
    assert booking.admin_notes == "Paid deposit"
    assert booking.updated_at > created_at


@pytest.mark.asyncio
async def test_update_status_keeps_notes_when_not_given(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    await store.update_status(booking.id, "confirmed", "Call before arrival")
    await store.update_status(booking.id, "cancelled")

    booking = await store.get(booking.id)
    assert booking.status == BookingStatus.CANCELLED
    assert booking.admin_notes == "Call before arrival"


@pytest.mark.asyncio
async def test_update_status_unknown_booking(store):
    with pytest.raises(BookingNotFoundError):
        await store.update_status(42, "confirmed")


@pytest.mark.asyncio
async def test_mark_notified_is_idempotent(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)

    await store.mark_notified(booking.id)
    await store.mark_notified(booking.id)
    assert (await store.get(booking.id)).whatsapp_notified is True

    # Unknown ids are ignored
    await store.mark_notified(999)


@pytest.mark.asyncio
async def test_stats_match_list_counts(store, cabin_booking_data, day_pass_data):
    for data in (cabin_booking_data, cabin_booking_data, day_pass_data, day_pass_data, day_pass_data):
        await store.create(data)
    bookings = await store.list()
    await store.update_status(bookings[0].id, "confirmed")
    await store.update_status(bookings[1].id, "cancelled")

    stats = await store.stats()
    everything = await store.list()

    assert stats.pending == len([b for b in everything if b.status == BookingStatus.PENDING])
    assert stats.confirmed == len([b for b in everything if b.status == BookingStatus.CONFIRMED])
    assert stats.cabin_bookings == len(await store.list(booking_type="cabin")) == 2
    assert stats.day_pass_bookings == len(await store.list(booking_type="day_pass")) == 3
    assert stats.pending == 3
    assert stats.confirmed == 1


@pytest.mark.asyncio
async def test_stats_on_empty_store(store):
    stats = await store.stats()
    assert (stats.pending, stats.confirmed, stats.cabin_bookings, stats.day_pass_bookings) == (0, 0, 0, 0)


@pytest.mark.asyncio
async def test_notification_trail(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    await store.log_notification(
        booking.id, "71234567", "hello", NotificationStatus.SENT, provider="meta"
    )
    await store.log_notification(
        booking.id, "71234567", "again", NotificationStatus.FAILED, error_message="boom"
    )
    await store.log_notification(None, "+96170000000", "test", NotificationStatus.SENT)

    entries = await store.list_notifications(booking.id)
    assert [e.status for e in entries] == [NotificationStatus.SENT, NotificationStatus.FAILED]
    assert entries[0].provider == "meta"
    assert entries[1].error_message == "boom"
    assert all(e.notification_type == "whatsapp" for e in entries)
    assert len(await store.list_notifications()) == 3


@pytest.mark.asyncio
async def test_seed_catalog_once(store):
    assert await store.seed_catalog() is True
    assert await store.seed_catalog() is False

    cabins = await store.list_cabin_types()
    passes = await store.list_day_pass_pricing()
    assert [c.name for c in cabins] == ["A-Frame Cabin"]
    assert cabins[0].price_per_night == Decimal("100.00")
    assert {p.name: p.price for p in passes} == {
        "Adult Day Pass": Decimal("15.00"),
        "Child Day Pass": Decimal("10.00"),
    }
