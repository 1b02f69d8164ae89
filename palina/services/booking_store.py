"""
Persistence for bookings, the notification trail and the catalog.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from palina.core.exceptions import BookingNotFoundError, ValidationError
from palina.models import (
    Booking,
    BookingStatus,
    BookingType,
    CabinType,
    DayPassPricing,
    NotificationLog,
    NotificationStatus,
    utc_now,
)

logger = logging.getLogger(__name__)

# Largest value an SQLite INTEGER column holds
MAX_INTEGER = 2**63 - 1
# Numeric(10, 2)
MAX_PRICE = Decimal("99999999.99")

DEFAULT_CABIN_TYPES = [
    {
        "name": "A-Frame Cabin",
        "description": (
            "Unique architectural design with modern comfort. Perfect for "
            "couples and families seeking a memorable stay."
        ),
        "capacity": 4,
        "price_per_night": Decimal("100.00"),
        "amenities": [
            "King Size Bed",
            "Pool View",
            "High Speed WiFi",
            "Air Conditioning",
            "Private Bathroom",
        ],
        "image_url": "/images/cabins-night-1.jpg",
    },
]

DEFAULT_DAY_PASSES = [
    {
        "name": "Adult Day Pass",
        "description": "Full day access to pool and facilities",
        "price": Decimal("15.00"),
    },
    {
        "name": "Child Day Pass",
        "description": "Full day access for children under 12",
        "price": Decimal("10.00"),
    },
]


@dataclass
class BookingStats:
    pending: int = 0
    confirmed: int = 0
    cabin_bookings: int = 0
    day_pass_bookings: int = 0


def parse_status(value: Any) -> BookingStatus:
    try:
        return BookingStatus(str(getattr(value, "value", value)).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status: {value!r}") from None


def parse_booking_type(value: Any) -> BookingType:
    try:
        return BookingType(str(getattr(value, "value", value)).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid booking type: {value!r}") from None


def _coerce_date(value: Any, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field} is not a valid date: {value!r}") from None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class BookingStore:
    """
    Booking records on top of an injected AsyncSession.

    Mutations commit their own transaction. Database errors roll the
    session back and propagate to the caller.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error("Booking store commit failed", exc_info=True)
            raise

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def _build_booking(self, data: dict) -> Booking:
        guest_name = _clean_text(data.get("guest_name"))
        guest_phone = _clean_text(data.get("guest_phone"))
        if not guest_name:
            raise ValidationError("guest_name is required")
        if not guest_phone:
            raise ValidationError("guest_phone is required")

        if not data.get("booking_type"):
            raise ValidationError("booking_type is required")
        booking_type = parse_booking_type(data["booking_type"])

        check_in = check_out = visit = None
        if booking_type == BookingType.CABIN:
            check_in = _coerce_date(data.get("check_in_date"), "check_in_date")
            check_out = _coerce_date(data.get("check_out_date"), "check_out_date")
            if not check_in or not check_out:
                raise ValidationError(
                    "check_in_date and check_out_date are required for cabin bookings"
                )
        else:
            visit = _coerce_date(data.get("visit_date"), "visit_date")
            if not visit:
                raise ValidationError("visit_date is required for day pass bookings")

        guests = data.get("number_of_guests")
        try:
            guests = 1 if guests is None else int(guests)
        except (TypeError, ValueError):
            raise ValidationError(f"number_of_guests is not a number: {guests!r}") from None
        if guests < 1:
            raise ValidationError("number_of_guests must be at least 1")
        if guests > MAX_INTEGER:
            raise ValidationError("number_of_guests is too large")

        try:
            total_price = Decimal(str(data.get("total_price") or 0))
        except InvalidOperation:
            raise ValidationError(
                f"total_price is not a number: {data.get('total_price')!r}"
            ) from None
        if not total_price.is_finite():
            raise ValidationError(f"total_price is not a number: {data.get('total_price')!r}")
        if total_price < 0:
            raise ValidationError("total_price must not be negative")
        if total_price > MAX_PRICE:
            raise ValidationError("total_price is too large")

        now = utc_now()
        return Booking(
            guest_name=guest_name,
            guest_email=_clean_text(data.get("guest_email")),
            guest_phone=guest_phone,
            booking_type=booking_type,
            cabin_type_id=(
                data.get("cabin_type_id") if booking_type == BookingType.CABIN else None
            ),
            check_in_date=check_in,
            check_out_date=check_out,
            visit_date=visit,
            number_of_guests=guests,
            total_price=total_price,
            status=BookingStatus.PENDING,
            special_requests=_clean_text(data.get("special_requests")),
            whatsapp_notified=False,
            created_at=now,
            updated_at=now,
        )

    async def create(self, data: dict) -> Booking:
        """Validate and insert a new pending booking."""
        booking = self._build_booking(data)
        self.session.add(booking)
        await self._commit()
        await self.session.refresh(booking)

        logger.info(
            f"Booking #{booking.id} created: {booking.booking_type.value} "
            f"for {booking.guest_name}"
        )
        return booking

    async def get_or_none(self, booking_id: int) -> Optional[Booking]:
        return await self.session.get(Booking, booking_id)

    async def get(self, booking_id: int) -> Booking:
        booking = await self.get_or_none(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    async def list(
        self,
        status: Any = None,
        booking_type: Any = None,
    ) -> List[Booking]:
        """Bookings matching all given filters, newest first."""
        stmt = select(Booking)
        if status:
            stmt = stmt.where(Booking.status == parse_status(status))
        if booking_type:
            stmt = stmt.where(Booking.booking_type == parse_booking_type(booking_type))
        stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(
        self,
        booking_id: int,
        new_status: Any,
        admin_notes: Optional[str] = None,
    ) -> Booking:
        """
        Overwrite the status. No transition rules here, see
        BookingService.change_status for those.
        """
        status = parse_status(new_status)
        booking = await self.get(booking_id)

        booking.status = status
        if admin_notes is not None:
            booking.admin_notes = admin_notes
        booking.updated_at = utc_now()
        await self._commit()

        logger.info(f"Booking #{booking_id} status -> {status.value}")
        return booking

    async def mark_notified(self, booking_id: int) -> None:
        """Set whatsapp_notified; repeated calls change nothing."""
        booking = await self.get_or_none(booking_id)
        if not booking:
            logger.warning(f"mark_notified: booking #{booking_id} does not exist")
            return
        if booking.whatsapp_notified:
            return

        booking.whatsapp_notified = True
        booking.updated_at = utc_now()
        await self._commit()

    async def stats(self) -> BookingStats:
        stmt = select(
            func.count(case((Booking.status == BookingStatus.PENDING, 1))),
            func.count(case((Booking.status == BookingStatus.CONFIRMED, 1))),
            func.count(case((Booking.booking_type == BookingType.CABIN, 1))),
            func.count(case((Booking.booking_type == BookingType.DAY_PASS, 1))),
        )
        pending, confirmed, cabins, day_passes = (await self.session.execute(stmt)).one()
        return BookingStats(
            pending=pending,
            confirmed=confirmed,
            cabin_bookings=cabins,
            day_pass_bookings=day_passes,
        )

    # ------------------------------------------------------------------
    # Notification trail
    # ------------------------------------------------------------------

    async def log_notification(
        self,
        booking_id: Optional[int],
        recipient: str,
        message: str,
        status: NotificationStatus,
        provider: Optional[str] = None,
        error_message: Optional[str] = None,
        notification_type: str = "whatsapp",
    ) -> NotificationLog:
        entry = NotificationLog(
            booking_id=booking_id,
            notification_type=notification_type,
            provider=provider,
            recipient=recipient,
            message=message,
            status=status,
            sent_at=utc_now(),
            error_message=error_message,
            created_at=utc_now(),
        )
        self.session.add(entry)
        await self._commit()
        return entry

    async def list_notifications(
        self, booking_id: Optional[int] = None
    ) -> List[NotificationLog]:
        stmt = select(NotificationLog).order_by(NotificationLog.id)
        if booking_id is not None:
            stmt = stmt.where(NotificationLog.booking_id == booking_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_cabin_types(self) -> List[CabinType]:
        result = await self.session.execute(
            select(CabinType).where(CabinType.is_active.is_(True)).order_by(CabinType.id)
        )
        return list(result.scalars().all())

    async def list_day_pass_pricing(self) -> List[DayPassPricing]:
        result = await self.session.execute(
            select(DayPassPricing)
            .where(DayPassPricing.is_active.is_(True))
            .order_by(DayPassPricing.id)
        )
        return list(result.scalars().all())

    async def seed_catalog(self) -> bool:
        """Insert default catalog rows into empty tables. Returns True if anything was added."""
        added = False

        cabins = await self.session.scalar(select(func.count(CabinType.id)))
        if not cabins:
            self.session.add_all(CabinType(**row) for row in DEFAULT_CABIN_TYPES)
            added = True

        passes = await self.session.scalar(select(func.count(DayPassPricing.id)))
        if not passes:
            self.session.add_all(DayPassPricing(**row) for row in DEFAULT_DAY_PASSES)
            added = True

        if added:
            await self._commit()
        return added
