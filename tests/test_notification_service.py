import time
from unittest.mock import MagicMock, patch

import pytest
import requests

from palina.core.config import Settings
from palina.core.exceptions import TransportError
from palina.models import BookingStatus, NotificationStatus
from palina.services.notification_service import (
    ConsoleTransport,
    MetaCloudTransport,
    NotificationSender,
    TwilioTransport,
    build_transports,
)

from conftest import ADMIN_PHONE, FakeTransport


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload or {}
    return response


class SlowTransport(FakeTransport):
    def send(self, to, message, timeout):
        time.sleep(1.5)
        return super().send(to, message, timeout)


class TestProviderChain:
    def test_unconfigured_chain_falls_back_to_console(self):
        sender = NotificationSender(None, build_transports(Settings()))
        assert isinstance(sender.select_transport(), ConsoleTransport)

    def test_first_configured_wins(self):
        meta = MetaCloudTransport("123", "token")
        twilio = TwilioTransport("AC1", "secret", "whatsapp:+14155238886")
        sender = NotificationSender(None, [meta, twilio])
        assert sender.select_transport() is meta

        meta.access_token = ""
        assert sender.select_transport() is twilio

    def test_build_transports_order(self):
        transports = build_transports(
            Settings(whatsapp_access_token="t", twilio_account_sid="AC1")
        )
        assert [t.name for t in transports] == ["meta", "twilio"]


@pytest.mark.asyncio
async def test_console_send_succeeds_and_logs_trail(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, build_transports(Settings()))

    result = await sender.send(booking.guest_phone, "Hello", booking.id)

    assert result.success is True
    assert result.provider == "console"
    trail = await store.list_notifications(booking.id)
    assert len(trail) == 1
    assert trail[0].status == NotificationStatus.SENT
    assert trail[0].provider == "console"
    assert (await store.get(booking.id)).whatsapp_notified is True


@pytest.mark.asyncio
async def test_send_without_booking_id_is_not_logged(store, transport):
    sender = NotificationSender(store, [transport])

    result = await sender.send("70 123 456", "Test message")

    assert result.success is True
    assert transport.sent == [("+96170123456", "Test message")]
    assert await store.list_notifications() == []


@pytest.mark.asyncio
async def test_provider_selected_per_send(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    primary = FakeTransport(name="primary", configured=False)
    backup = FakeTransport(name="backup")
    sender = NotificationSender(store, [primary, backup])

    first = await sender.send(booking.guest_phone, "one", booking.id)
    primary.configured = True
    second = await sender.send(booking.guest_phone, "two", booking.id)

    assert (first.provider, second.provider) == ("backup", "primary")
    assert [e.provider for e in await store.list_notifications(booking.id)] == ["backup", "primary"]


@pytest.mark.asyncio
async def test_empty_recipient_fails(store, transport, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [transport])

    result = await sender.send("", "Hello", booking.id)

    assert result.success is False
    assert transport.sent == []
    trail = await store.list_notifications(booking.id)
    assert trail[0].status == NotificationStatus.FAILED


@pytest.mark.asyncio
async def test_send_timeout_is_a_failed_result(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [SlowTransport(name="slow")], timeout=0.1)

    result = await sender.send(booking.guest_phone, "Hello", booking.id)

    assert result.success is False
    assert "timed out" in result.error
    trail = await store.list_notifications(booking.id)
    assert trail[0].status == NotificationStatus.FAILED
    assert (await store.get(booking.id)).whatsapp_notified is False


@pytest.mark.asyncio
async def test_admin_notification_requires_admin_phone(store, transport, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [transport])

    result = await sender.notify_admin_new_booking(booking)

    assert result.success is False
    assert result.error == "Admin phone not configured"
    assert transport.sent == []
    assert await store.list_notifications(booking.id) == []


@pytest.mark.asyncio
async def test_status_update_for_pending_sends_nothing(store, transport, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [transport], admin_phone=ADMIN_PHONE)

    result = await sender.notify_guest_status_update(booking, BookingStatus.PENDING)

    assert result.success is False
    assert result.error == "Unknown status"
    assert transport.sent == []


class TestMetaCloudTransport:
    def test_send_posts_to_graph_api(self):
        transport = MetaCloudTransport("555", "token", "v18.0")
        with patch("palina.services.notification_service.requests.post") as post:
            post.return_value = _response(200, {"messages": [{"id": "wamid.1"}]})
            transport.send("+96171234567", "Hi", timeout=5)

        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://graph.facebook.com/v18.0/555/messages"
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert kwargs["json"]["to"] == "96171234567"
        assert kwargs["json"]["text"] == {"body": "Hi"}
        assert kwargs["timeout"] == 5

    def test_api_error_message_is_surfaced(self):
        transport = MetaCloudTransport("555", "token")
        with patch("palina.services.notification_service.requests.post") as post:
            post.return_value = _response(401, {"error": {"message": "Invalid OAuth access token"}})
            with pytest.raises(TransportError, match="Invalid OAuth access token"):
                transport.send("+96171234567", "Hi", timeout=5)

    def test_missing_phone_number_id(self):
        transport = MetaCloudTransport("", "token")
        assert transport.is_configured() is True
        with pytest.raises(TransportError):
            transport.send("+96171234567", "Hi", timeout=5)

    def test_network_error(self):
        transport = MetaCloudTransport("555", "token")
        with patch(
            "palina.services.notification_service.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(TransportError, match="unreachable"):
                transport.send("+96171234567", "Hi", timeout=5)


class TestTwilioTransport:
    def test_send_uses_basic_auth_and_whatsapp_prefix(self):
        transport = TwilioTransport("AC1", "secret", "whatsapp:+14155238886")
        with patch("palina.services.notification_service.requests.post") as post:
            post.return_value = _response(201, {"sid": "SM1"})
            transport.send("+96171234567", "Hi", timeout=5)

        assert post.call_args.args[0] == (
            "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json"
        )
        kwargs = post.call_args.kwargs
        assert kwargs["auth"] == ("AC1", "secret")
        assert kwargs["data"]["To"] == "whatsapp:+96171234567"
        assert kwargs["data"]["From"] == "whatsapp:+14155238886"

    def test_rejected_message(self):
        transport = TwilioTransport("AC1", "secret", "whatsapp:+14155238886")
        with patch("palina.services.notification_service.requests.post") as post:
            post.return_value = _response(400, {"message": "Unverified number"})
            with pytest.raises(TransportError, match="Unverified number"):
                transport.send("+96171234567", "Hi", timeout=5)


@pytest.mark.asyncio
async def test_transport_failure_becomes_failed_result(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [TwilioTransport("AC1", "secret", "whatsapp:+1415")])

    with patch("palina.services.notification_service.requests.post") as post:
        post.return_value = _response(500, {})
        result = await sender.send(booking.guest_phone, "Hi", booking.id)

    assert result.success is False
    assert result.provider == "twilio"
    assert "HTTP 500" in result.error
    trail = await store.list_notifications(booking.id)
    assert trail[0].error_message == result.error


@pytest.mark.asyncio
async def test_non_json_success_body_counts_as_sent(store, cabin_booking_data):
    booking = await store.create(cabin_booking_data)
    sender = NotificationSender(store, [MetaCloudTransport("555", "token")])
    response = _response(200)
    response.json.side_effect = ValueError("No JSON object could be decoded")

    with patch("palina.services.notification_service.requests.post", return_value=response):
        result = await sender.send(booking.guest_phone, "Hi", booking.id)

    assert result.success is True
    assert result.provider == "meta"
    assert (await store.list_notifications(booking.id))[0].status == NotificationStatus.SENT
