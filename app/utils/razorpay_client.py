"""
Razorpay gateway client.

Wraps order creation, confirmation signature checks and payment lookups. The
shared secret only ever comes from the GatewayConfig passed in.
"""
import hashlib
import hmac

import razorpay
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from app.core.config import GatewayConfig
from app.core.errors import (
    GatewayConfigurationError,
    GatewayUnavailable,
    InvalidAmount,
    InvalidInput,
    TransactionNotFound,
)
from app.core.logging_config import get_logger
from app.models.enums import PaymentRecordStatus
from app.schemas.payment import OrderHandle, TransactionDetails

logger = get_logger().bind(log_type="payment")

SUCCESS_STATUSES = {"captured", "authorized"}
FAILED_STATUSES = {"failed"}
OPEN_ORDER_STATUSES = {"created", "attempted"}


def map_payment_status(gateway_status: str | None) -> PaymentRecordStatus:
    if gateway_status in SUCCESS_STATUSES:
        return PaymentRecordStatus.SUCCESS
    if gateway_status in FAILED_STATUSES:
        return PaymentRecordStatus.FAILED
    return PaymentRecordStatus.PENDING


class PaymentGatewayClient:
    def __init__(self, config: GatewayConfig, client=None):
        self.config = config
        self.client = client or razorpay.Client(auth=(config.key_id, config.key_secret))

    @property
    def key_id(self) -> str:
        return self.config.key_id

    # =================================================================
    # ORDERS
    # =================================================================
    def create_order(self, amount_minor: int, currency: str, receipt: str) -> OrderHandle:
        if isinstance(amount_minor, bool) or not isinstance(amount_minor, int) or amount_minor <= 0:
            raise InvalidAmount("amount must be a positive integer in minor units")
        if not currency:
            raise InvalidInput("currency is required")

        try:
            order = self.client.order.create(
                data={
                    "amount": amount_minor,
                    "currency": currency,
                    "receipt": receipt,
                    "payment_capture": 1,
                },
                timeout=self.config.timeout_seconds,
            )
        except BadRequestError as e:
            logger.warning(f"Order rejected by gateway | receipt={receipt} | {e}")
            raise InvalidInput(f"Gateway rejected the order: {e}")
        except requests.exceptions.ConnectTimeout as e:
            logger.error(f"Order create could not connect | receipt={receipt} | {e}")
            raise GatewayUnavailable("Payment gateway unreachable", outcome="failed", receipt=receipt)
        except (requests.exceptions.RequestException, ServerError, GatewayError) as e:
            # The request may have reached the gateway; the order must be looked up, not re-sent
            logger.error(f"Order create outcome unknown | receipt={receipt} | {e}")
            raise GatewayUnavailable("Payment gateway did not confirm the order", outcome="unknown", receipt=receipt)

        logger.info(f"Order created | id={order['id']} | amount={order['amount']} | receipt={receipt}")
        return self._to_handle(order)

    def fetch_order(self, order_id: str) -> OrderHandle:
        try:
            order = self.client.order.fetch(order_id, timeout=self.config.timeout_seconds)
        except BadRequestError as e:
            raise InvalidInput(f"Unknown order {order_id}: {e}")
        except (requests.exceptions.RequestException, ServerError, GatewayError) as e:
            logger.error(f"Order fetch failed | id={order_id} | {e}")
            raise GatewayUnavailable("Payment gateway unavailable")
        return self._to_handle(order)

    def find_open_order(self, receipt: str, amount_minor: int) -> OrderHandle | None:
        """Look for an unpaid order created earlier under the same receipt."""
        try:
            result = self.client.order.all(
                data={"receipt": receipt}, timeout=self.config.timeout_seconds
            )
        except (requests.exceptions.RequestException, BadRequestError, ServerError, GatewayError) as e:
            logger.error(f"Order lookup failed | receipt={receipt} | {e}")
            raise GatewayUnavailable("Payment gateway unavailable")

        for order in result.get("items", []):
            if order.get("amount") == amount_minor and order.get("status") in OPEN_ORDER_STATUSES:
                return self._to_handle(order)
        return None

    @staticmethod
    def _to_handle(order: dict) -> OrderHandle:
        return OrderHandle(
            id=order["id"],
            amount=order["amount"],
            currency=order["currency"],
            receipt=order.get("receipt"),
            status=order.get("status", "created"),
        )

    # =================================================================
    # SIGNATURES
    # =================================================================
    def sign(self, order_id: str, transaction_id: str) -> str:
        secret = self.config.key_secret
        if not secret:
            raise GatewayConfigurationError("RAZORPAY_KEY_SECRET is not configured")

        message = f"{order_id}|{transaction_id}".encode("utf-8")
        return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, transaction_id: str, signature: str) -> bool:
        expected = self.sign(order_id, transaction_id)

        if not isinstance(signature, str):
            return False
        try:
            provided = signature.encode("ascii")
        except UnicodeEncodeError:
            return False

        return hmac.compare_digest(expected.encode("ascii"), provided)

    # =================================================================
    # TRANSACTIONS
    # =================================================================
    def fetch_transaction(self, transaction_id: str) -> TransactionDetails:
        try:
            payment = self.client.payment.fetch(transaction_id, timeout=self.config.timeout_seconds)
        except BadRequestError as e:
            logger.warning(f"Transaction not found | id={transaction_id} | {e}")
            raise TransactionNotFound(f"Transaction {transaction_id} not found")
        except (requests.exceptions.RequestException, ServerError, GatewayError) as e:
            logger.error(f"Transaction fetch failed | id={transaction_id} | {e}")
            raise GatewayUnavailable("Payment gateway unavailable")

        if not payment or "amount" not in payment:
            raise GatewayUnavailable("Payment gateway returned an incomplete transaction")

        return TransactionDetails(
            transaction_id=payment.get("id", transaction_id),
            order_id=payment.get("order_id"),
            amount_minor=int(payment["amount"]),
            currency=payment.get("currency") or self.config.currency,
            contact=payment.get("contact"),
            email=payment.get("email"),
            status=map_payment_status(payment.get("status")),
        )
