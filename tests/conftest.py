"""
Pytest configuration for Palina Resort tests
"""
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Ensure palina is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from palina.core.exceptions import TransportError
from palina.database import Base
from palina.services.booking_service import BookingService
from palina.services.booking_store import BookingStore
from palina.services.notification_service import BaseTransport, NotificationSender

ADMIN_PHONE = "+96170000000"


class FakeTransport(BaseTransport):
    """Records sends instead of calling a provider"""

    def __init__(self, name="fake", configured=True, fail_with=None):
        self.name = name
        self.configured = configured
        self.fail_with = fail_with
        self.sent = []

    def is_configured(self) -> bool:
        return self.configured

    def send(self, to: str, message: str, timeout: float) -> dict:
        if self.fail_with:
            raise TransportError(self.name, self.fail_with)
        self.sent.append((to, message))
        return {"id": f"msg-{len(self.sent)}"}


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    Session = async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with Session() as s:
        yield s

    await engine.dispose()


@pytest.fixture
def store(session):
    return BookingStore(session)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def notifier(store, transport):
    return NotificationSender(store, [transport], admin_phone=ADMIN_PHONE, timeout=2.0)


@pytest.fixture
def service(store, notifier):
    return BookingService(store, notifier)


@pytest.fixture
def cabin_booking_data():
    """Sample data for a cabin booking"""
    return {
        "guest_name": "Ana",
        "guest_phone": "71234567",
        "booking_type": "cabin",
        "check_in_date": "2024-06-01",
        "check_out_date": "2024-06-03",
        "number_of_guests": 2,
        "total_price": 200,
    }


@pytest.fixture
def day_pass_data():
    """Sample data for a day pass booking"""
    return {
        "guest_name": "Karim",
        "guest_phone": "+961 3 123 456",
        "guest_email": "karim@example.com",
        "booking_type": "day_pass",
        "visit_date": "2024-06-10",
        "number_of_guests": 3,
        "total_price": 45,
    }
