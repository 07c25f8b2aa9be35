from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import bookings, fares, payments, vehicle_rates
from app.core.errors import SettlementError, settlement_error_handler

# ⭐ Import logging system
from app.core.logging_config import get_logger

logger = get_logger()

app = FastAPI(
    title="Ride Booking API",
    version="1.0.0",
    description="API for ride fare quotes, bookings and Razorpay payment settlement"
)

# ⭐ Domain errors -> {"error", "detail", "retryable"}
app.add_exception_handler(SettlementError, settlement_error_handler)


# ⭐ Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url.path}")
        return response

    except Exception as e:
        logger.error(f"ERROR: {request.url.path} -> {str(e)}")
        raise e


# ⭐ CORS (important for frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Can restrict later for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------- ROUTERS --------
app.include_router(fares.router)
app.include_router(bookings.router)
app.include_router(payments.router)
app.include_router(vehicle_rates.router)

@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}
