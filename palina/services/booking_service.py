import logging
from dataclasses import dataclass
from typing import Optional

from palina.core.exceptions import ValidationError
from palina.models import Booking, BookingStatus
from palina.services.booking_store import BookingStore, parse_status
from palina.services.notification_service import NotificationResult, NotificationSender

logger = logging.getLogger(__name__)


@dataclass
class BookingCreation:
    booking: Booking
    admin: NotificationResult
    guest: NotificationResult


@dataclass
class StatusChange:
    booking: Booking
    notification: NotificationResult


class BookingService:
    """Booking lifecycle: persist first, notify after."""

    ALLOWED_TRANSITIONS = {
        BookingStatus.PENDING: {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        },
        BookingStatus.CONFIRMED: {
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
        },
    }

    def __init__(self, store: BookingStore, notifier: NotificationSender):
        self.store = store
        self.notifier = notifier

    @classmethod
    def can_transition(cls, current: BookingStatus, target: BookingStatus) -> bool:
        if current == target:
            return True
        return target in cls.ALLOWED_TRANSITIONS.get(current, set())

    async def create_booking(self, data: dict) -> BookingCreation:
        """
        Store the booking, then tell the admin and the guest.

        Notification failures are reported in the result; the booking
        stays persisted either way.
        """
        booking = await self.store.create(data)

        admin = await self.notifier.notify_admin_new_booking(booking)
        guest = await self.notifier.notify_guest_booking_received(booking)

        if not (admin.success and guest.success):
            logger.warning(
                f"Booking #{booking.id} saved, notifications: "
                f"admin={admin.success} ({admin.error}), guest={guest.success} ({guest.error})"
            )
        return BookingCreation(booking=booking, admin=admin, guest=guest)

    async def change_status(
        self,
        booking_id: int,
        new_status,
        admin_notes: Optional[str] = None,
        *,
        force: bool = False,
    ) -> StatusChange:
        """
        Move a booking to `new_status` and notify the guest.

        Raises ValidationError for unknown statuses and for transitions
        outside ALLOWED_TRANSITIONS unless `force` is set.
        """
        target = parse_status(new_status)
        booking = await self.store.get(booking_id)
        current = booking.status

        if not self.can_transition(current, target):
            if not force:
                raise ValidationError(
                    f"Cannot change booking #{booking_id} from {current.value} to {target.value}"
                )
            logger.warning(
                f"Forced status change for booking #{booking_id}: {current.value} -> {target.value}"
            )

        await self.store.update_status(booking_id, target, admin_notes)
        booking = await self.store.get(booking_id)

        notification = await self.notifier.notify_guest_status_update(booking, target)
        return StatusChange(booking=booking, notification=notification)
