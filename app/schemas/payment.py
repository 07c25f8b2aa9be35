from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, EmailStr, Field

from app.models.enums import PaymentRecordStatus


class CreateOrderRequest(BaseModel):
    booking_id: int
    amount: Decimal = Field(gt=0)

    model_config = {"extra": "forbid"}


class OrderHandle(BaseModel):
    id: str
    amount: int  # minor units
    currency: str
    receipt: str | None = None
    status: str = "created"


class OrderOut(OrderHandle):
    booking_id: int
    key_id: str


class PaymentCallback(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)
    user_email: EmailStr | None = None
    ride_id: int | None = None

    model_config = {"extra": "forbid"}


class TransactionDetails(BaseModel):
    transaction_id: str
    order_id: str | None = None
    amount_minor: int
    currency: str
    contact: str | None = None
    email: str | None = None
    status: PaymentRecordStatus


class SettlementStatus(str, Enum):
    SETTLED = "settled"
    REJECTED = "rejected"


class SettlementResult(BaseModel):
    status: SettlementStatus
    transaction_id: str
    order_id: str
    booking_id: int | None = None
    reason: str | None = None


class PaymentOut(BaseModel):
    id: int
    order_id: str
    transaction_id: str
    amount: Decimal
    currency: str
    status: PaymentRecordStatus
    email: str | None = None
    contact: str | None = None
    ride_id: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
