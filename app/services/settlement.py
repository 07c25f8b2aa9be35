"""
Ride fare quoting and payment settlement.

A settlement attempt moves Initiated -> AwaitingConfirmation when an order is
handed to the client, then Verifying -> Settled | Rejected when the gateway
confirmation comes back. The orchestrator keeps no state between requests;
bookings and payment records carry it, and the payment store's unique key on
(order_id, transaction_id) is what makes confirmation exactly-once.
"""
from decimal import Decimal
from enum import Enum

from app.core.errors import (
    InvalidAmount,
    InvalidInput,
    PaymentConflict,
    SignatureMismatch,
    TransactionPending,
)
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import PaymentMethod, PaymentRecordStatus, PaymentStatus, TripStatus
from app.models.payment import Payment
from app.schemas.booking import BookingCreate, BookingPaymentUpdate, BookingTripUpdate, TripUpdateRequest
from app.schemas.fare import FareQuote
from app.schemas.payment import OrderHandle, PaymentCallback, SettlementResult, SettlementStatus
from app.services.stores import BookingStore, PaymentStore
from app.utils.pricing import compute_fare, from_minor_units, round_money, to_minor_units
from app.utils.razorpay_client import OPEN_ORDER_STATUSES, PaymentGatewayClient
from app.utils.route_resolver import RouteResolver

logger = get_logger()
payment_log = logger.bind(log_type="payment")
booking_log = logger.bind(log_type="booking")


def receipt_for(booking_id: int) -> str:
    return f"booking_{booking_id}"


class SettlementState(str, Enum):
    INITIATED = "initiated"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    VERIFYING = "verifying"
    SETTLED = "settled"
    REJECTED = "rejected"


TRANSITIONS = {
    SettlementState.INITIATED: {SettlementState.AWAITING_CONFIRMATION},
    SettlementState.AWAITING_CONFIRMATION: {SettlementState.VERIFYING},
    SettlementState.VERIFYING: {SettlementState.SETTLED, SettlementState.REJECTED},
    SettlementState.SETTLED: set(),
    SettlementState.REJECTED: set(),
}


class IllegalTransition(RuntimeError):
    pass


class SettlementAttempt:
    """Request-scoped view of one order's progress."""

    def __init__(self, order_id: str, state: SettlementState):
        self.order_id = order_id
        self.state = state

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.state]

    def transition(self, new_state: SettlementState):
        if new_state not in TRANSITIONS[self.state]:
            raise IllegalTransition(f"{self.state.value} -> {new_state.value} for order {self.order_id}")
        payment_log.debug(f"Order {self.order_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state


class SettlementOrchestrator:
    def __init__(
        self,
        gateway: PaymentGatewayClient,
        bookings: BookingStore,
        payments: PaymentStore,
        routes: RouteResolver,
    ):
        self.gateway = gateway
        self.bookings = bookings
        self.payments = payments
        self.routes = routes

    @property
    def currency(self) -> str:
        return self.gateway.config.currency

    # =================================================================
    # QUOTES & BOOKINGS
    # =================================================================
    def quote_fare(self, origin: str, destination: str, vehicle_rate) -> FareQuote:
        if vehicle_rate is None:
            raise InvalidInput("vehicle rate is required")

        route = self.routes.resolve(origin, destination)
        total = compute_fare(vehicle_rate.base_fare, vehicle_rate.per_km_rate, route.distance_km)

        return FareQuote(
            origin=origin,
            destination=destination,
            distance_km=route.distance_km,
            distance_text=route.distance_text,
            duration_seconds=route.duration_seconds,
            duration_text=route.duration_text,
            base_fare=Decimal(vehicle_rate.base_fare),
            per_km_rate=Decimal(vehicle_rate.per_km_rate),
            total_fare=round_money(total),
            currency=self.currency,
        )

    def create_booking(self, data: BookingCreate, vehicle_rate) -> Booking:
        quote = self.quote_fare(data.origin, data.destination, vehicle_rate)

        booking = Booking(
            name=data.name,
            email=data.email,
            mobile=data.mobile,
            passengers=data.passengers,
            ride_date=data.ride_date,
            ride_time=data.ride_time,
            pickup_address=data.pickup_address,
            drop_address=data.drop_address,
            origin=quote.origin,
            destination=quote.destination,
            distance_km=quote.distance_km,
            distance_text=quote.distance_text,
            duration_seconds=quote.duration_seconds,
            duration_text=quote.duration_text,
            vehicle_rate_id=vehicle_rate.id,
            car_name=vehicle_rate.car_name,
            base_fare=quote.base_fare,
            per_km_rate=quote.per_km_rate,
            total_fare=quote.total_fare,
            payment_method=data.payment_method,
            payment_status=PaymentStatus.PENDING,
            advance_payment=Decimal("0.00"),
            balance_payment=quote.total_fare,
            trip_status=TripStatus.PENDING,
        )

        self.bookings.add(booking)
        self.bookings.commit()

        booking_log.info(
            f"Booking created | id={booking.id} | {booking.email} | "
            f"{quote.distance_km} km | fare={quote.total_fare} | method={data.payment_method.value}"
        )
        return booking

    # =================================================================
    # ORDER CREATION
    # =================================================================
    def create_order(self, booking_id: int, amount) -> OrderHandle:
        booking = self.bookings.get(booking_id)

        if booking.payment_method == PaymentMethod.COD:
            raise InvalidInput("Cash bookings are paid at pickup")
        if booking.payment_status != PaymentStatus.PENDING:
            raise InvalidInput("Booking is already paid")

        amount_minor = to_minor_units(amount)
        total_minor = int(Decimal(booking.total_fare) * 100)

        if booking.payment_method == PaymentMethod.ONLINE and amount_minor != total_minor:
            raise InvalidAmount(f"Online bookings are paid in full ({booking.total_fare})")
        if booking.payment_method == PaymentMethod.ADVANCED:
            if Decimal(booking.advance_payment) > 0:
                raise InvalidInput("Advance already paid for this booking")
            if amount_minor > total_minor:
                raise InvalidAmount(f"Advance cannot exceed the fare ({booking.total_fare})")

        receipt = receipt_for(booking.id)
        order = self._find_open_order(booking, amount_minor, receipt)
        if order is None:
            order = self.gateway.create_order(amount_minor, self.currency, receipt)

        attempt = SettlementAttempt(order.id, SettlementState.INITIATED)

        if booking.razorpay_order_id != order.id:
            self.bookings.update(booking.id, BookingPaymentUpdate(razorpay_order_id=order.id))
            self.bookings.commit()

        attempt.transition(SettlementState.AWAITING_CONFIRMATION)
        payment_log.info(f"Order ready | booking={booking.id} | order={order.id} | amount={order.amount}")
        return order

    def _find_open_order(self, booking: Booking, amount_minor: int, receipt: str) -> OrderHandle | None:
        """Reuse an unpaid order, including one whose creation outcome was unknown.

        A booking has at most one live order: a stored order that is still
        open for another amount, or already paid but not yet confirmed here,
        blocks a new one so the rider cannot be charged twice.
        """
        if booking.razorpay_order_id:
            try:
                order = self.gateway.fetch_order(booking.razorpay_order_id)
            except InvalidInput:
                order = None

            if order is not None and order.status == "paid":
                payment_log.warning(
                    f"Order {order.id} paid, confirmation outstanding | booking={booking.id}"
                )
                raise TransactionPending(
                    f"Order {order.id} is paid and awaiting confirmation", order_id=order.id
                )
            if order is not None and order.status in OPEN_ORDER_STATUSES:
                if order.amount == amount_minor:
                    return order
                raise PaymentConflict(
                    f"Booking has an open order {order.id} for {from_minor_units(order.amount)}",
                    order_id=order.id,
                )

        return self.gateway.find_open_order(receipt, amount_minor)

    # =================================================================
    # CONFIRMATION
    # =================================================================
    def confirm_payment(self, callback: PaymentCallback) -> SettlementResult:
        order_id = callback.razorpay_order_id
        transaction_id = callback.razorpay_payment_id

        attempt = SettlementAttempt(order_id, SettlementState.AWAITING_CONFIRMATION)
        attempt.transition(SettlementState.VERIFYING)

        # 1. signature
        if not self.gateway.verify_signature(order_id, transaction_id, callback.razorpay_signature):
            payment_log.warning(f"Signature mismatch | order={order_id} | txn={transaction_id}")
            return self._reject(attempt, transaction_id, callback.ride_id, SignatureMismatch.kind)

        # 2. authoritative amount / currency / contact
        details = self.gateway.fetch_transaction(transaction_id)

        if details.order_id and details.order_id != order_id:
            payment_log.warning(
                f"Transaction belongs to another order | txn={transaction_id} | "
                f"claimed={order_id} | actual={details.order_id}"
            )
            return self._reject(attempt, transaction_id, callback.ride_id, "order_mismatch")

        if details.status == PaymentRecordStatus.PENDING:
            raise TransactionPending(f"Transaction {transaction_id} is not captured yet")

        # The order keeps its single record slot for the attempt that succeeds
        if details.status == PaymentRecordStatus.FAILED:
            payment_log.warning(f"Transaction failed | order={order_id} | txn={transaction_id}")
            return self._reject(attempt, transaction_id, callback.ride_id, "payment_failed")

        # 3. which booking the money belongs to (gateway reads stay outside the unit of work)
        booking = self._booking_for_order(order_id, callback.ride_id)

        # 4. exactly-once record
        record = Payment(
            amount=from_minor_units(details.amount_minor),
            amount_minor=details.amount_minor,
            currency=details.currency,
            status=details.status,
            email=details.email or callback.user_email,
            contact=details.contact,
            ride_id=callback.ride_id,
        )
        inserted = self.payments.insert_if_absent(order_id, transaction_id, record)

        if not inserted.created:
            payment_log.info(f"Duplicate confirmation absorbed | order={order_id} | txn={transaction_id}")
            return self._result_for(attempt, inserted.record)

        # 5. propagate to the booking
        if booking is not None:
            self._apply_to_booking(booking, record)

        self.payments.commit()

        payment_log.info(
            f"Payment recorded | order={order_id} | txn={transaction_id} | "
            f"{record.amount} {record.currency} | {record.status.value}"
        )

        # 6. terminal state
        return self._result_for(attempt, record)

    def _booking_for_order(self, order_id: str, ride_id) -> Booking | None:
        """The booking `ride_id` names, if the order was opened for it.

        Payments that cannot be tied to a booking stay recorded; reconciling
        them is an operations task.
        """
        if ride_id is None:
            return None

        booking = self.bookings.find(ride_id)
        if not booking:
            payment_log.error(f"Orphaned payment | order={order_id} | unknown booking={ride_id}")
            return None

        if booking.razorpay_order_id == order_id:
            return booking

        try:
            order = self.gateway.fetch_order(order_id)
        except InvalidInput:
            order = None
        if order is not None and order.receipt == receipt_for(booking.id):
            return booking

        payment_log.error(
            f"Unreconciled payment | order={order_id} was not opened for booking={booking.id}"
        )
        return None

    def _apply_to_booking(self, booking: Booking, record: Payment):
        if booking.payment_status in (PaymentStatus.PAID, PaymentStatus.COMPLETED):
            booking_log.warning(
                f"Booking {booking.id} already {booking.payment_status.value}, "
                f"txn={record.transaction_id} not applied"
            )
            return

        if booking.payment_method == PaymentMethod.COD:
            booking_log.warning(
                f"Online payment for cash booking {booking.id} | txn={record.transaction_id} not applied"
            )
            return

        total = Decimal(booking.total_fare)
        paid = Decimal(record.amount)
        advance = Decimal(booking.advance_payment or 0) + paid

        if advance > total:
            payment_log.error(
                f"Overpayment | booking={booking.id} | txn={record.transaction_id} | "
                f"received={advance} | fare={total} | not applied"
            )
            return

        fields = {
            "advance_payment": advance,
            "balance_payment": total - advance,
        }
        # advanced bookings stay pending until the balance is collected at drop-off
        if booking.payment_method == PaymentMethod.ONLINE and advance >= total:
            fields["payment_status"] = PaymentStatus.PAID

        booking = self.bookings.update(booking.id, BookingPaymentUpdate(**fields))
        booking_log.info(
            f"Booking {booking.id} payment applied | paid={paid} | advance={advance} | "
            f"balance={total - advance} | status={booking.payment_status.value}"
        )

    def _reject(self, attempt: SettlementAttempt, transaction_id: str, booking_id, reason: str) -> SettlementResult:
        attempt.transition(SettlementState.REJECTED)
        return SettlementResult(
            status=SettlementStatus.REJECTED,
            transaction_id=transaction_id,
            order_id=attempt.order_id,
            booking_id=booking_id,
            reason=reason,
        )

    def _result_for(self, attempt: SettlementAttempt, record: Payment) -> SettlementResult:
        attempt.transition(SettlementState.SETTLED)
        return SettlementResult(
            status=SettlementStatus.SETTLED,
            transaction_id=record.transaction_id,
            order_id=record.order_id,
            booking_id=record.ride_id,
        )

    # =================================================================
    # TRIP COMPLETION (trip axis belongs to trip management)
    # =================================================================
    def complete_trip(self, booking_id: int, update: TripUpdateRequest) -> Booking:
        booking = self.bookings.get(booking_id)

        trip_changes = BookingTripUpdate(**update.model_dump(exclude_unset=True, exclude={"balance_collected"}))
        booking = self.bookings.update(booking.id, trip_changes)

        # The collected amount stays in balance_payment so advance + balance still
        # equals the fare; payment_status=completed records that it was received.
        if update.balance_collected:
            if booking.trip_status != TripStatus.COMPLETED:
                self.bookings.rollback()
                raise InvalidInput("Balance can only be collected once the trip is completed")
            if booking.payment_status != PaymentStatus.COMPLETED:
                booking = self.bookings.update(
                    booking.id, BookingPaymentUpdate(payment_status=PaymentStatus.COMPLETED)
                )

        self.bookings.commit()
        booking_log.info(
            f"Booking {booking.id} trip update | trip={booking.trip_status.value} | "
            f"payment={booking.payment_status.value} | driver={booking.driver_assigned}"
        )
        return booking
