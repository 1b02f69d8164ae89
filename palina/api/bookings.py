from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from palina.api.deps import get_booking_service, get_booking_store
from palina.core.config import settings
from palina.core.exceptions import ValidationError
from palina.core.rate_limiter import limiter
from palina.domain.pricing import cabin_total, day_pass_total
from palina.models import BookingType
from palina.schemas.booking import (
    BookingCreate,
    BookingCreatedOut,
    BookingOut,
    BookingStatsOut,
    BookingStatusChangedOut,
    BookingStatusUpdate,
    NotificationLogOut,
)
from palina.services.booking_service import BookingService
from palina.services.booking_store import BookingStore

router = APIRouter(prefix="/api", tags=["bookings"])


async def _quote(store: BookingStore, payload: BookingCreate):
    """Catalog price for a form that did not send total_price"""
    if payload.booking_type == BookingType.CABIN:
        cabins = await store.list_cabin_types()
        cabin = next((c for c in cabins if c.id == payload.cabin_type_id), None)
        cabin = cabin or (cabins[0] if cabins else None)
        if not cabin or not payload.check_in_date or not payload.check_out_date:
            raise ValidationError("total_price is required")
        return cabin_total(payload.check_in_date, payload.check_out_date, cabin.price_per_night)

    passes = await store.list_day_pass_pricing()
    if not passes:
        raise ValidationError("total_price is required")
    return day_pass_total(payload.number_of_guests, passes[0].price)


@router.get("/bookings", response_model=list[BookingOut])
async def list_bookings(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    type_filter: Optional[str] = Query(default=None, alias="type"),
    store: BookingStore = Depends(get_booking_store),
):
    return await store.list(status=status_filter, booking_type=type_filter)


@router.get("/bookings/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: int, store: BookingStore = Depends(get_booking_store)):
    return await store.get(booking_id)


@router.post(
    "/bookings",
    response_model=BookingCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.rate_limit_bookings)
async def create_booking(
    request: Request,
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    data = payload.model_dump()
    if data["total_price"] is None:
        data["total_price"] = await _quote(service.store, payload)

    created = await service.create_booking(data)
    return {
        "booking": created.booking,
        "notifications": {
            "admin": created.admin.as_dict(),
            "guest": created.guest.as_dict(),
        },
    }


@router.patch("/bookings/{booking_id}/status", response_model=BookingStatusChangedOut)
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    change = await service.change_status(
        booking_id, payload.status, payload.admin_notes, force=payload.force
    )
    return {"booking": change.booking, "notification": change.notification.as_dict()}


@router.get("/bookings/{booking_id}/notifications", response_model=list[NotificationLogOut])
async def list_booking_notifications(
    booking_id: int, store: BookingStore = Depends(get_booking_store)
):
    await store.get(booking_id)
    return await store.list_notifications(booking_id)


@router.get("/stats", response_model=BookingStatsOut)
async def get_stats(store: BookingStore = Depends(get_booking_store)):
    return asdict(await store.stats())
