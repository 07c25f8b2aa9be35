from decimal import Decimal
from pydantic import BaseModel, Field


class VehicleRateBase(BaseModel):
    car_name: str = Field(min_length=1)
    capacity: int = Field(default=4, ge=1, le=15)

    # Pricing fields
    base_fare: Decimal = Field(ge=0)
    per_km_rate: Decimal = Field(ge=0)


class VehicleRateCreate(VehicleRateBase):
    model_config = {"extra": "forbid"}


class VehicleRateOut(VehicleRateBase):
    id: int
    active: bool

    model_config = {"from_attributes": True}
