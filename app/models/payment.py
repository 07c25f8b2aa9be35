from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Enum, UniqueConstraint
from app.db.session import Base
from app.models.enums import PaymentRecordStatus, enum_values


class Payment(Base):
    """Append-only ledger entry for one gateway transaction."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(String, unique=True, nullable=False, index=True)
    transaction_id = Column(String, unique=True, nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(
        Enum(PaymentRecordStatus, name="paymentrecordstatus", values_callable=enum_values),
        nullable=False,
        default=PaymentRecordStatus.SUCCESS,
    )

    email = Column(String, nullable=True)
    contact = Column(String, nullable=True)
    ride_id = Column(Integer, nullable=True, index=True)  # weak ref to bookings.id

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("order_id", "transaction_id", name="uq_payment_order_transaction"),
    )
