"""
WhatsApp notifications: transports, provider chain and delivery trail.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

import requests
from sqlalchemy.exc import SQLAlchemyError

from palina.core.config import Settings
from palina.core.exceptions import TransportError
from palina.core.messages import (
    format_admin_new_booking,
    format_guest_booking_received,
    format_guest_status_update,
)
from palina.models import Booking, NotificationStatus
from palina.services.booking_store import BookingStore
from palina.utils.phone import digits_only, normalize_phone

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    success: bool
    provider: Optional[str] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {"success": self.success, "provider": self.provider, "error": self.error}


# ----------------------------------------------------------------------
# Transports
# ----------------------------------------------------------------------


class BaseTransport(ABC):
    """A way to deliver one text message to one phone number"""

    name: str = "base"

    @abstractmethod
    def is_configured(self) -> bool:
        ...

    @abstractmethod
    def send(self, to: str, message: str, timeout: float) -> dict:
        """Deliver the message or raise TransportError. `to` is already normalized."""


def _error_detail(response: requests.Response, *path: str) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data if isinstance(data, str) else None


def _json_body(response: requests.Response) -> dict:
    # Delivered even when the provider answers with a non-JSON body
    try:
        return response.json()
    except ValueError:
        return {}


class MetaCloudTransport(BaseTransport):
    """WhatsApp Cloud API (graph.facebook.com)"""

    name = "meta"
    BASE_URL = "https://graph.facebook.com"

    def __init__(self, phone_number_id: str, access_token: str, api_version: str = "v18.0"):
        self.phone_number_id = phone_number_id
        self.access_token = access_token
        self.api_version = api_version

    def is_configured(self) -> bool:
        # The token alone selects this provider; a missing phone number id
        # then fails at send time.
        return bool(self.access_token)

    def send(self, to: str, message: str, timeout: float) -> dict:
        if not self.phone_number_id or not self.access_token:
            raise TransportError(self.name, "WhatsApp Cloud API credentials not configured")

        try:
            response = requests.post(
                f"{self.BASE_URL}/{self.api_version}/{self.phone_number_id}/messages",
                headers={"Authorization": f"Bearer {self.access_token}"},
                json={
                    "messaging_product": "whatsapp",
                    "to": digits_only(to),
                    "type": "text",
                    "text": {"body": message},
                },
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, f"WhatsApp Cloud API unreachable: {e}") from e

        if not response.ok:
            detail = _error_detail(response, "error", "message")
            raise TransportError(
                self.name, detail or f"Failed to send WhatsApp message (HTTP {response.status_code})"
            )
        return _json_body(response)


class TwilioTransport(BaseTransport):
    """Twilio WhatsApp gateway (REST API, basic auth)"""

    name = "twilio"
    BASE_URL = "https://api.twilio.com/2010-04-01"

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number

    def is_configured(self) -> bool:
        return bool(self.account_sid)

    def send(self, to: str, message: str, timeout: float) -> dict:
        if not self.account_sid or not self.auth_token or not self.from_number:
            raise TransportError(self.name, "Twilio credentials not configured")

        try:
            response = requests.post(
                f"{self.BASE_URL}/Accounts/{self.account_sid}/Messages.json",
                auth=(self.account_sid, self.auth_token),
                data={
                    "From": self.from_number,
                    "To": f"whatsapp:{to}",
                    "Body": message,
                },
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, f"Twilio unreachable: {e}") from e

        if not response.ok:
            detail = _error_detail(response, "message")
            raise TransportError(
                self.name,
                detail or f"Failed to send WhatsApp message via Twilio (HTTP {response.status_code})",
            )
        return _json_body(response)


class ConsoleTransport(BaseTransport):
    """Offline fallback: writes the message to the log and reports success"""

    name = "console"

    def is_configured(self) -> bool:
        return True

    def send(self, to: str, message: str, timeout: float) -> dict:
        logger.info(f"📱 WhatsApp notification (no provider configured) to {to}:\n{message}")
        return {"logged": True}


def build_transports(settings: Settings) -> List[BaseTransport]:
    """Provider chain in priority order: Cloud API, then Twilio."""
    return [
        MetaCloudTransport(
            phone_number_id=settings.whatsapp_phone_number_id,
            access_token=settings.whatsapp_access_token,
            api_version=settings.whatsapp_api_version,
        ),
        TwilioTransport(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_whatsapp_number,
        ),
    ]


# ----------------------------------------------------------------------
# Sender
# ----------------------------------------------------------------------


class NotificationSender:
    """
    Sends WhatsApp messages through the first configured transport.

    `send` never raises: every failure turns into a failed
    NotificationResult and, for booking-related messages, a failed row in
    the notification trail.
    """

    def __init__(
        self,
        store: BookingStore,
        transports: Sequence[BaseTransport],
        default_country_code: str = "+961",
        timeout: float = 10.0,
        admin_phone: str = "",
    ):
        self.store = store
        self.transports = list(transports)
        self.default_country_code = default_country_code
        self.timeout = timeout
        self.admin_phone = admin_phone
        self._console = ConsoleTransport()

    def select_transport(self) -> BaseTransport:
        """Evaluated on every send so credential changes apply immediately"""
        for transport in self.transports:
            if transport.is_configured():
                return transport
        return self._console

    async def send(
        self,
        recipient: str,
        message: str,
        booking_id: Optional[int] = None,
    ) -> NotificationResult:
        transport = self.select_transport()
        to = normalize_phone(recipient, self.default_country_code)
        result = NotificationResult(success=False, provider=transport.name)

        try:
            if not to:
                raise TransportError(transport.name, "Recipient phone number is empty")
            # Blocking HTTP runs in a thread; wait_for bounds the whole attempt
            await asyncio.wait_for(
                asyncio.to_thread(transport.send, to, message, self.timeout),
                timeout=self.timeout + 1,
            )
            result.success = True
        except TransportError as e:
            result.error = str(e)
        except asyncio.TimeoutError:
            result.error = f"{transport.name} send timed out after {self.timeout}s"
        except Exception as e:
            logger.error(f"Unexpected error sending via {transport.name}", exc_info=True)
            result.error = str(e) or e.__class__.__name__

        if result.success:
            logger.info(f"WhatsApp message sent to {to} via {transport.name}")
        else:
            logger.error(f"WhatsApp notification error ({transport.name}): {result.error}")

        if booking_id is not None:
            await self._record(booking_id, recipient, message, result)

        return result

    async def _record(
        self,
        booking_id: int,
        recipient: str,
        message: str,
        result: NotificationResult,
    ) -> None:
        try:
            await self.store.log_notification(
                booking_id=booking_id,
                recipient=recipient,
                message=message,
                status=NotificationStatus.SENT if result.success else NotificationStatus.FAILED,
                provider=result.provider,
                error_message=result.error,
            )
            if result.success:
                await self.store.mark_notified(booking_id)
        except SQLAlchemyError:
            # The message itself went out (or failed) already; a trail
            # write failure must not turn into a pipeline failure
            logger.error(
                f"Could not record notification for booking #{booking_id}", exc_info=True
            )

    # ------------------------------------------------------------------
    # Booking events
    # ------------------------------------------------------------------

    async def notify_admin_new_booking(self, booking: Booking) -> NotificationResult:
        if not self.admin_phone:
            logger.info("Admin WhatsApp number not configured")
            return NotificationResult(success=False, error="Admin phone not configured")
        return await self.send(self.admin_phone, format_admin_new_booking(booking), booking.id)

    async def notify_guest_booking_received(self, booking: Booking) -> NotificationResult:
        return await self.send(
            booking.guest_phone, format_guest_booking_received(booking), booking.id
        )

    async def notify_guest_status_update(self, booking: Booking, status) -> NotificationResult:
        message = format_guest_status_update(booking, status)
        if message is None:
            return NotificationResult(success=False, error="Unknown status")
        return await self.send(booking.guest_phone, message, booking.id)
