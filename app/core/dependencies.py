from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.core.auth_utils import require_role
from app.core.config import GatewayConfig, RoutingConfig, load_gateway_config, load_routing_config
from app.services.settlement import SettlementOrchestrator
from app.services.stores import BookingStore, PaymentStore
from app.utils.razorpay_client import PaymentGatewayClient
from app.utils.route_resolver import RouteResolver

security = HTTPBearer()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------- AUTH ----------------
def require_admin(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    return require_role(credentials.credentials, "admin")


# ---------------- EXTERNAL SERVICES ----------------
@lru_cache
def get_gateway_config() -> GatewayConfig:
    return load_gateway_config()


@lru_cache
def get_routing_config() -> RoutingConfig:
    return load_routing_config()


def get_gateway_client(config: GatewayConfig = Depends(get_gateway_config)) -> PaymentGatewayClient:
    return PaymentGatewayClient(config)


def get_route_resolver(config: RoutingConfig = Depends(get_routing_config)) -> RouteResolver:
    return RouteResolver(config)


def get_orchestrator(
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_gateway_client),
    routes: RouteResolver = Depends(get_route_resolver),
) -> SettlementOrchestrator:
    return SettlementOrchestrator(
        gateway=gateway,
        bookings=BookingStore(db),
        payments=PaymentStore(db),
        routes=routes,
    )
