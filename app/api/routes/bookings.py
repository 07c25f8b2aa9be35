from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.routes.vehicle_rates import load_vehicle_rate
from app.core.dependencies import get_db, get_orchestrator, require_admin
from app.core.logging_config import get_logger
from app.schemas.booking import BookingCreate, BookingOut, TripUpdateRequest
from app.services.settlement import SettlementOrchestrator

router = APIRouter(prefix="/bookings", tags=["Bookings"])
logger = get_logger()


# ---------------------------------------------------------------------
# CREATE BOOKING
# ---------------------------------------------------------------------
@router.post("/", response_model=dict, status_code=201)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    rate = load_vehicle_rate(db, data.vehicle_rate_id)
    booking = orchestrator.create_booking(data, rate)

    return {
        "message": "Ride booked successfully",
        "distance": f"{booking.distance_km:.2f} km",
        "total_fare": booking.total_fare,
        "booking": BookingOut.model_validate(booking),
    }


# ---------------------------------------------------------------------
# GET BOOKING
# ---------------------------------------------------------------------
@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: int,
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.bookings.get(booking_id)


# ---------------------------------------------------------------------
# TRIP UPDATE  (Admin Only)
# Only trip fields and the balance hand-over are accepted here; payment
# amounts are written by settlement alone.
# ---------------------------------------------------------------------
@router.put("/{booking_id}/trip", response_model=BookingOut)
def update_trip(
    booking_id: int,
    data: TripUpdateRequest,
    admin_email: str = Depends(require_admin),
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    booking = orchestrator.complete_trip(booking_id, data)

    logger.bind(log_type="admin").info(
        f"Trip updated by {admin_email} | booking={booking_id} | "
        f"{data.model_dump(exclude_unset=True)}"
    )
    return booking
