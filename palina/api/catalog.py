from fastapi import APIRouter, Depends

from palina.api.deps import get_booking_store
from palina.schemas.catalog import CabinTypeOut, DayPassPricingOut
from palina.services.booking_store import BookingStore

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/cabins", response_model=list[CabinTypeOut])
async def list_cabins(store: BookingStore = Depends(get_booking_store)):
    return await store.list_cabin_types()


@router.get("/day-passes", response_model=list[DayPassPricingOut])
async def list_day_passes(store: BookingStore = Depends(get_booking_store)):
    return await store.list_day_pass_pricing()
