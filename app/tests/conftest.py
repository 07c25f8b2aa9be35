"""
Shared fixtures: in-memory database, a fake Razorpay SDK object behind the
real gateway client, and a mocked distance-matrix service.
"""
import os
import tempfile

os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="ride-logs-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ.pop("REDIS_URL", None)

from datetime import date
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from razorpay.errors import BadRequestError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import GatewayConfig, RoutingConfig
from app.core.dependencies import get_db, get_gateway_client, get_route_resolver
from app.db.session import Base
from app.main import app
from app.models.enums import PaymentMethod
from app.models.vehicle_rate import VehicleRate
from app.schemas.booking import BookingCreate
from app.services.settlement import SettlementOrchestrator
from app.services.stores import BookingStore, PaymentStore
from app.utils.razorpay_client import PaymentGatewayClient
from app.utils.route_resolver import RouteResolver

GATEWAY_SECRET = "test_gateway_secret"


# ---------------------------------------------------------------------
# FAKE RAZORPAY SDK
# ---------------------------------------------------------------------
class FakeOrders:
    def __init__(self):
        self.orders = []
        self.calls = []
        self.next_ids = ["order_abc"]
        self.error = None

    def create(self, data=None, **kwargs):
        self.calls.append(("create", data, kwargs))
        if self.error:
            raise self.error
        order_id = self.next_ids.pop(0) if self.next_ids else f"order_{len(self.orders) + 1}"
        order = {
            "id": order_id,
            "entity": "order",
            "amount": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "status": "created",
        }
        self.orders.append(order)
        return order

    def fetch(self, order_id, **kwargs):
        self.calls.append(("fetch", order_id, kwargs))
        for order in self.orders:
            if order["id"] == order_id:
                return order
        raise BadRequestError("The id provided does not exist")

    def all(self, data=None, **kwargs):
        self.calls.append(("all", data, kwargs))
        receipt = (data or {}).get("receipt")
        return {
            "entity": "collection",
            "items": [o for o in self.orders if o["receipt"] == receipt],
        }


class FakePayments:
    def __init__(self):
        self.items = {}
        self.calls = []
        self.error = None

    def add(self, payment_id, order_id, amount, status="captured", currency="INR"):
        self.items[payment_id] = {
            "id": payment_id,
            "entity": "payment",
            "order_id": order_id,
            "amount": amount,
            "currency": currency,
            "status": status,
            "email": "rider@example.com",
            "contact": "+919876543210",
        }

    def fetch(self, payment_id, **kwargs):
        self.calls.append((payment_id, kwargs))
        if self.error:
            raise self.error
        if payment_id not in self.items:
            raise BadRequestError("The id provided does not exist")
        return self.items[payment_id]


class FakeRazorpay:
    def __init__(self):
        self.order = FakeOrders()
        self.payment = FakePayments()


# ---------------------------------------------------------------------
# DATABASE
# ---------------------------------------------------------------------
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


# ---------------------------------------------------------------------
# EXTERNAL SERVICES
# ---------------------------------------------------------------------
@pytest.fixture
def fake_razorpay():
    return FakeRazorpay()


@pytest.fixture
def gateway(fake_razorpay):
    config = GatewayConfig(key_id="rzp_test_key", key_secret=GATEWAY_SECRET, timeout_seconds=5)
    return PaymentGatewayClient(config, client=fake_razorpay)


@pytest.fixture
def route_state():
    """Mutable knobs for the mocked distance-matrix service."""
    return {"meters": 10000, "seconds": 1500, "status_code": 200, "requests": []}


@pytest.fixture
def routes(route_state):
    def handler(request):
        route_state["requests"].append(request)
        if route_state["status_code"] != 200:
            return httpx.Response(route_state["status_code"], json={"error": "upstream"})
        return httpx.Response(200, json={
            "status": "OK",
            "rows": [{
                "elements": [{
                    "status": "OK",
                    "distance": {"text": f"{route_state['meters'] / 1000} km", "value": route_state["meters"]},
                    "duration": {"text": "25 mins", "value": route_state["seconds"]},
                }]
            }],
        })

    client = httpx.Client(transport=httpx.MockTransport(handler))
    config = RoutingConfig(api_key="test-key", base_url="https://routes.test", timeout_seconds=3)
    yield RouteResolver(config, http_client=client)
    client.close()


@pytest.fixture
def orchestrator(db_session, gateway, routes):
    return SettlementOrchestrator(
        gateway=gateway,
        bookings=BookingStore(db_session),
        payments=PaymentStore(db_session),
        routes=routes,
    )


# ---------------------------------------------------------------------
# DOMAIN DATA
# ---------------------------------------------------------------------
@pytest.fixture
def sedan(db_session):
    rate = VehicleRate(car_name="Sedan", capacity=4, base_fare=Decimal("50"), per_km_rate=Decimal("12"))
    db_session.add(rate)
    db_session.commit()
    db_session.refresh(rate)
    return rate


@pytest.fixture
def booking_payload(sedan):
    def build(method=PaymentMethod.ONLINE, **overrides):
        data = {
            "name": "Asha Rao",
            "email": "rider@example.com",
            "mobile": "+919876543210",
            "origin": "12.9716,77.5946",
            "destination": "13.0827,77.5877",
            "pickup_address": "MG Road",
            "drop_address": "Hebbal",
            "ride_date": date(2026, 11, 2),
            "ride_time": "09:30",
            "passengers": 2,
            "vehicle_rate_id": sedan.id,
            "payment_method": method,
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def make_booking(orchestrator, sedan, booking_payload):
    def make(method=PaymentMethod.ONLINE):
        return orchestrator.create_booking(BookingCreate(**booking_payload(method)), sedan)

    return make


# ---------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------
@pytest.fixture
def client(session_factory, gateway, routes):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway_client] = lambda: gateway
    app.dependency_overrides[get_route_resolver] = lambda: routes

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = jwt.encode({"sub": "ops@example.com", "role": "admin"}, "test-jwt-secret", algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}
