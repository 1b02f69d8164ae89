from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palina.database import Base


def utc_now() -> datetime:
    """Naive UTC timestamp, the way SQLite stores DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class BookingType(str, Enum):
    CABIN = "cabin"
    DAY_PASS = "day_pass"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class CabinType(Base):
    __tablename__ = "cabin_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String)
    capacity: Mapped[int] = mapped_column(Integer, default=2)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amenities: Mapped[list] = mapped_column(JSON, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(String)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now
    )

    bookings: Mapped[list["Booking"]] = relationship(back_populates="cabin_type")


class DayPassPricing(Base):
    __tablename__ = "day_pass_pricing"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now
    )


class Booking(Base):
    __tablename__ = "bookings"
    # AUTOINCREMENT: ids are never reused after a delete or failed insert
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)

    # Guest
    guest_name: Mapped[str] = mapped_column(String, nullable=False)
    guest_email: Mapped[Optional[str]] = mapped_column(String)
    guest_phone: Mapped[str] = mapped_column(String, nullable=False)

    # Booking details
    booking_type: Mapped[BookingType] = mapped_column(
        SQLEnum(BookingType, values_callable=_enum_values), nullable=False
    )
    cabin_type_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cabin_types.id"))
    cabin_type: Mapped[Optional["CabinType"]] = relationship(back_populates="bookings")
    check_in_date: Mapped[Optional[date]] = mapped_column(Date)
    check_out_date: Mapped[Optional[date]] = mapped_column(Date)
    visit_date: Mapped[Optional[date]] = mapped_column(Date)
    number_of_guests: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Lifecycle
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus, values_callable=_enum_values),
        default=BookingStatus.PENDING,
        index=True,
    )
    special_requests: Mapped[Optional[str]] = mapped_column(Text)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)
    whatsapp_notified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now
    )

    notifications: Mapped[list["NotificationLog"]] = relationship(
        back_populates="booking"
    )

    @property
    def is_cabin(self) -> bool:
        return self.booking_type == BookingType.CABIN


class NotificationLog(Base):
    """One row per send attempt; rows are never updated"""

    __tablename__ = "notification_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("bookings.id"), index=True
    )
    booking: Mapped[Optional["Booking"]] = relationship(back_populates="notifications")
    notification_type: Mapped[str] = mapped_column(String, default="whatsapp")
    provider: Mapped[Optional[str]] = mapped_column(String)
    recipient: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[NotificationStatus] = mapped_column(
        SQLEnum(NotificationStatus, values_callable=_enum_values),
        default=NotificationStatus.PENDING,
    )
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
