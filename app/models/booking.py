from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, Enum
from app.db.session import Base
from app.models.enums import PaymentMethod, PaymentStatus, TripStatus, enum_values


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    # Passenger
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    mobile = Column(String, nullable=False)
    passengers = Column(Integer, nullable=False, default=1)
    ride_date = Column(Date, nullable=False)
    ride_time = Column(String, nullable=False)
    pickup_address = Column(String, nullable=False)
    drop_address = Column(String, nullable=False)

    # Route (resolved at quote time)
    origin = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    distance_km = Column(Numeric(10, 3), nullable=False)
    distance_text = Column(String, nullable=True)
    duration_seconds = Column(Integer, nullable=False, default=0)
    duration_text = Column(String, nullable=True)

    # Commercial terms, fixed once quoted
    vehicle_rate_id = Column(Integer, nullable=True)  # weak ref, no FK
    car_name = Column(String, nullable=False)
    base_fare = Column(Numeric(10, 2), nullable=False)
    per_km_rate = Column(Numeric(10, 2), nullable=False)
    total_fare = Column(Numeric(10, 2), nullable=False)

    # Payment terms
    payment_method = Column(
        Enum(PaymentMethod, name="paymentmethod", values_callable=enum_values),
        nullable=False,
        default=PaymentMethod.ONLINE,
    )
    payment_status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    advance_payment = Column(Numeric(10, 2), nullable=False, default=0)
    balance_payment = Column(Numeric(10, 2), nullable=False, default=0)
    razorpay_order_id = Column(String, nullable=True, index=True)

    # Trip axis, owned by trip management
    trip_status = Column(
        Enum(TripStatus, name="tripstatus", values_callable=enum_values),
        nullable=False,
        default=TripStatus.PENDING,
    )
    driver_assigned = Column(String, nullable=False, default="Not Assigned")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
