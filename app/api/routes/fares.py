from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.routes.vehicle_rates import load_vehicle_rate
from app.core.dependencies import get_db, get_orchestrator
from app.schemas.fare import FareQuote, FareQuoteRequest
from app.services.settlement import SettlementOrchestrator

router = APIRouter(prefix="/fares", tags=["Fares"])


# =====================================================================
# QUOTE A FARE
# =====================================================================
@router.post("/quote", response_model=FareQuote)
def quote_fare(
    data: FareQuoteRequest,
    db: Session = Depends(get_db),
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    rate = load_vehicle_rate(db, data.vehicle_rate_id)
    return orchestrator.quote_fare(data.origin, data.destination, rate)
