from fastapi import APIRouter, Depends

from palina.api.deps import get_notification_sender
from palina.core.config import settings
from palina.schemas.booking import NotificationResultOut, WhatsAppTestIn
from palina.services.notification_service import NotificationSender

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])


@router.post("/test", response_model=NotificationResultOut)
async def send_test_message(
    payload: WhatsAppTestIn,
    notifier: NotificationSender = Depends(get_notification_sender),
):
    """Send a one-off message to check the provider setup. Not logged to the trail."""
    message = payload.message or f"Test message from {settings.resort_name}"
    result = await notifier.send(payload.phone, message)
    return result.as_dict()
