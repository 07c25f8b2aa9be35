from sqlalchemy import Column, Integer, String, Boolean, Numeric
from app.db.session import Base


class VehicleRate(Base):
    __tablename__ = "vehicle_rates"

    id = Column(Integer, primary_key=True, index=True)
    car_name = Column(String, unique=True, nullable=False)
    capacity = Column(Integer, nullable=False, default=4)

    # Pricing fields
    base_fare = Column(Numeric(10, 2), nullable=False, default=0)
    per_km_rate = Column(Numeric(10, 2), nullable=False, default=0)

    active = Column(Boolean, nullable=False, default=True)
