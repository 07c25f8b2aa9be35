from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.logging_config import get_logger

logger = get_logger()


class SettlementError(Exception):
    """Base error for the fare / settlement core.

    `kind` is the stable name callers switch on, `retryable` tells them whether
    the same request may be replayed.
    """

    kind = "settlement_error"
    status_code = 500
    retryable = False

    def __init__(self, detail: str = "", **extra):
        super().__init__(detail or self.kind)
        self.detail = detail or self.kind
        self.extra = extra

    def to_dict(self):
        body = {
            "error": self.kind,
            "detail": self.detail,
            "retryable": self.retryable,
        }
        body.update(self.extra)
        return body


# ---------------- CALLER ERRORS ----------------
class InvalidInput(SettlementError):
    kind = "invalid_input"
    status_code = 400


class InvalidAmount(InvalidInput):
    kind = "invalid_amount"


class BookingNotFound(SettlementError):
    kind = "booking_not_found"
    status_code = 404


class PaymentConflict(SettlementError):
    kind = "payment_conflict"
    status_code = 409


# ---------------- UPSTREAM ERRORS ----------------
class RouteUnavailable(SettlementError):
    kind = "route_unavailable"
    status_code = 503
    retryable = True


class GatewayUnavailable(SettlementError):
    """Gateway unreachable or failing.

    outcome="unknown" means the request may have reached the gateway, so a
    create-order must be reconciled by querying, not by assuming failure.
    """

    kind = "gateway_unavailable"
    status_code = 502
    retryable = True

    def __init__(self, detail: str = "", outcome: str = "failed", **extra):
        super().__init__(detail, outcome=outcome, **extra)
        self.outcome = outcome


class TransactionNotFound(SettlementError):
    kind = "transaction_not_found"
    status_code = 404


class TransactionPending(SettlementError):
    kind = "transaction_pending"
    status_code = 409
    retryable = True


class SignatureMismatch(SettlementError):
    kind = "signature_mismatch"
    status_code = 400


# ---------------- LOCAL ERRORS ----------------
class PersistenceFailure(SettlementError):
    kind = "persistence_failure"
    status_code = 503
    retryable = True


class GatewayConfigurationError(SettlementError):
    kind = "gateway_misconfigured"
    status_code = 500


async def settlement_error_handler(request: Request, exc: SettlementError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{exc.kind} on {request.url.path}: {exc.detail}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
