from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, require_admin
from app.core.logging_config import get_logger
from app.models.vehicle_rate import VehicleRate
from app.schemas.vehicle_rate import VehicleRateCreate, VehicleRateOut

router = APIRouter(prefix="/vehicle-rates", tags=["Vehicle Rates"])
logger = get_logger()


def load_vehicle_rate(db: Session, rate_id: int) -> VehicleRate:
    rate = db.query(VehicleRate).filter(
        VehicleRate.id == rate_id,
        VehicleRate.active == True
    ).first()
    if not rate:
        raise HTTPException(status_code=404, detail="Vehicle type not available")
    return rate


# =====================================================================
# CREATE RATE  (Admin Only)
# =====================================================================
@router.post("/", response_model=VehicleRateOut, status_code=201)
def create_vehicle_rate(
    data: VehicleRateCreate,
    admin_email: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if db.query(VehicleRate).filter(VehicleRate.car_name == data.car_name).first():
        raise HTTPException(status_code=400, detail="Vehicle rate already exists")

    rate = VehicleRate(
        car_name=data.car_name,
        capacity=data.capacity,
        base_fare=data.base_fare,
        per_km_rate=data.per_km_rate,
        active=True,
    )
    db.add(rate)
    db.commit()
    db.refresh(rate)

    logger.bind(log_type="admin").info(
        f"Vehicle rate created by {admin_email} | {rate.car_name} | "
        f"base={rate.base_fare} | per_km={rate.per_km_rate}"
    )
    return rate


# =====================================================================
# GET RATE
# =====================================================================
@router.get("/{rate_id}", response_model=VehicleRateOut)
def get_vehicle_rate(rate_id: int, db: Session = Depends(get_db)):
    return load_vehicle_rate(db, rate_id)
