from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palina.core.config import settings
from palina.database import get_db
from palina.services.booking_service import BookingService
from palina.services.booking_store import BookingStore
from palina.services.excel_service import ExcelService
from palina.services.notification_service import NotificationSender, build_transports


async def get_booking_store(db: AsyncSession = Depends(get_db)) -> BookingStore:
    return BookingStore(db)


async def get_notification_sender(
    store: BookingStore = Depends(get_booking_store),
) -> NotificationSender:
    return NotificationSender(
        store,
        build_transports(settings),
        default_country_code=settings.default_country_code,
        timeout=settings.notification_timeout_seconds,
        admin_phone=settings.admin_whatsapp_number,
    )


async def get_booking_service(
    store: BookingStore = Depends(get_booking_store),
    notifier: NotificationSender = Depends(get_notification_sender),
) -> BookingService:
    return BookingService(store, notifier)


async def get_excel_service(
    store: BookingStore = Depends(get_booking_store),
) -> ExcelService:
    return ExcelService(store, settings.export_dir)
