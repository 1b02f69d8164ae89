from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CabinTypeOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    capacity: int
    price_per_night: Decimal
    amenities: list[str]
    image_url: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class DayPassPricingOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal

    model_config = ConfigDict(from_attributes=True)
