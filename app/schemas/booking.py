from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field

from app.models.enums import PaymentMethod, PaymentStatus, TripStatus


class BookingBase(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    mobile: str = Field(pattern=r"^\+?\d{10,15}$")
    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    pickup_address: str = Field(min_length=1)
    drop_address: str = Field(min_length=1)
    ride_date: date
    ride_time: str = Field(min_length=1)
    passengers: int = Field(default=1, ge=1, le=15)


class BookingCreate(BookingBase):
    vehicle_rate_id: int
    payment_method: PaymentMethod = PaymentMethod.ONLINE

    model_config = {"extra": "forbid"}


class BookingOut(BookingBase):
    id: int
    distance_km: Decimal
    distance_text: str | None = None
    duration_seconds: int
    duration_text: str | None = None
    vehicle_rate_id: int | None = None
    car_name: str
    base_fare: Decimal
    per_km_rate: Decimal
    total_fare: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    advance_payment: Decimal
    balance_payment: Decimal
    razorpay_order_id: str | None = None
    trip_status: TripStatus
    driver_assigned: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------
# PARTIAL UPDATES
# Each workflow gets its own model naming the only fields it may write.
# ---------------------------------------------------------------------
class BookingPaymentUpdate(BaseModel):
    payment_status: PaymentStatus | None = None
    advance_payment: Decimal | None = None
    balance_payment: Decimal | None = None
    razorpay_order_id: str | None = None

    model_config = {"extra": "forbid"}


class BookingTripUpdate(BaseModel):
    trip_status: TripStatus | None = None
    driver_assigned: str | None = Field(default=None, min_length=1)

    model_config = {"extra": "forbid"}


class TripUpdateRequest(BookingTripUpdate):
    # Cash balance handed over at drop-off; moves payment_status to completed
    balance_collected: bool = False
