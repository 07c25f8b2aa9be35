from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.core.dependencies import get_orchestrator
from app.schemas.payment import (
    CreateOrderRequest,
    OrderOut,
    PaymentCallback,
    PaymentOut,
    SettlementResult,
    SettlementStatus,
)
from app.services.settlement import SettlementOrchestrator

router = APIRouter(prefix="/payments", tags=["Payments"])


# =====================================================================
# CREATE ORDER
# =====================================================================
@router.post("/create-order", response_model=OrderOut)
def create_order(
    data: CreateOrderRequest,
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    order = orchestrator.create_order(data.booking_id, data.amount)

    return OrderOut(
        **order.model_dump(),
        booking_id=data.booking_id,
        key_id=orchestrator.gateway.key_id,
    )


# =====================================================================
# VERIFY PAYMENT
# =====================================================================
@router.post(
    "/verify-payment",
    response_model=SettlementResult,
    responses={400: {"model": SettlementResult}},
)
def verify_payment(
    data: PaymentCallback,
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    result = orchestrator.confirm_payment(data)

    if result.status == SettlementStatus.REJECTED:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))

    return result


# =====================================================================
# PAYMENT RECORD
# =====================================================================
@router.get("/{transaction_id}", response_model=PaymentOut)
def get_payment(
    transaction_id: str,
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    payment = orchestrator.payments.get_by_transaction(transaction_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment
