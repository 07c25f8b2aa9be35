from decimal import Decimal
from pydantic import BaseModel, Field


class FareQuoteRequest(BaseModel):
    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    vehicle_rate_id: int

    model_config = {"extra": "forbid"}


class RouteInfo(BaseModel):
    distance_km: Decimal
    distance_text: str | None = None
    duration_seconds: int = 0
    duration_text: str | None = None


class FareQuote(BaseModel):
    origin: str
    destination: str
    distance_km: Decimal
    distance_text: str | None = None
    duration_seconds: int
    duration_text: str | None = None
    base_fare: Decimal
    per_km_rate: Decimal
    total_fare: Decimal
    currency: str = "INR"
