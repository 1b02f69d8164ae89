from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from palina.models import BookingStatus, BookingType, NotificationStatus


class BookingBase(BaseModel):
    guest_name: str
    guest_phone: str
    guest_email: Optional[str] = None
    booking_type: BookingType
    cabin_type_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    visit_date: Optional[date] = None
    number_of_guests: int = 1
    special_requests: Optional[str] = None


class BookingCreate(BookingBase):
    guest_name: str = Field(min_length=1, max_length=120)
    guest_phone: str = Field(min_length=1, max_length=32)
    guest_email: Optional[str] = Field(default=None, max_length=254)
    number_of_guests: int = Field(default=1, ge=1, le=50)
    special_requests: Optional[str] = Field(default=None, max_length=2000)
    # Left empty by the form when the client did not compute it
    total_price: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("guest_name", "guest_phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("check_out_date")
    @classmethod
    def validate_dates(cls, v: Optional[date], info):
        check_in = info.data.get("check_in_date")
        if v and check_in and v <= check_in:
            raise ValueError("check_out_date must be after check_in_date")
        return v


class BookingOut(BookingBase):
    id: int
    total_price: Decimal
    status: BookingStatus
    admin_notes: Optional[str] = None
    whatsapp_notified: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingStatusUpdate(BaseModel):
    status: str
    admin_notes: Optional[str] = None
    # Admin override of the transition rules
    force: bool = False


class BookingStatsOut(BaseModel):
    pending: int
    confirmed: int
    cabin_bookings: int
    day_pass_bookings: int


class NotificationResultOut(BaseModel):
    success: bool
    provider: Optional[str] = None
    error: Optional[str] = None


class BookingCreatedOut(BaseModel):
    booking: BookingOut
    notifications: dict[str, NotificationResultOut]


class BookingStatusChangedOut(BaseModel):
    booking: BookingOut
    notification: NotificationResultOut


class NotificationLogOut(BaseModel):
    id: int
    booking_id: Optional[int]
    notification_type: str
    provider: Optional[str]
    recipient: str
    message: Optional[str]
    status: NotificationStatus
    error_message: Optional[str]
    sent_at: Optional[datetime]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WhatsAppTestIn(BaseModel):
    phone: str = Field(min_length=3, max_length=32)
    message: Optional[str] = None
