import os
from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class GatewayConfig(BaseModel):
    key_id: str = ""
    key_secret: str = ""
    currency: str = "INR"
    timeout_seconds: float = 10.0


class RoutingConfig(BaseModel):
    api_key: str = ""
    base_url: str = "https://api.distancematrix.ai"
    timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 300


# -------- ENV LOADERS --------
def load_gateway_config() -> GatewayConfig:
    return GatewayConfig(
        key_id=os.getenv("RAZORPAY_KEY_ID", ""),
        key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
        currency=os.getenv("PAYMENT_CURRENCY", "INR"),
        timeout_seconds=float(os.getenv("RAZORPAY_TIMEOUT_SECONDS", 10)),
    )


def load_routing_config() -> RoutingConfig:
    return RoutingConfig(
        api_key=os.getenv("DISTANCE_MATRIX_API_KEY", ""),
        base_url=os.getenv("DISTANCE_MATRIX_URL", "https://api.distancematrix.ai"),
        timeout_seconds=float(os.getenv("DISTANCE_MATRIX_TIMEOUT_SECONDS", 10)),
        cache_ttl_seconds=int(os.getenv("ROUTE_CACHE_TTL_SECONDS", 300)),
    )
