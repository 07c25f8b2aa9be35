"""
SQLAlchemy-backed Booking and Payment stores.

Both stores share the request's session. Nothing here commits on its own;
the caller commits once so a payment record and its booking update land
together.
"""
from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import BookingNotFound, PaymentConflict, PersistenceFailure
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.payment import Payment

logger = get_logger()


class SqlStore:
    def __init__(self, db: Session):
        self.db = db

    def commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Commit failed: {e}")
            raise PersistenceFailure("Could not save changes, retry the request")

    def rollback(self):
        self.db.rollback()


# ---------------------------------------------------------------------
# BOOKINGS
# ---------------------------------------------------------------------
class BookingStore(SqlStore):
    def find(self, booking_id: int) -> Booking | None:
        try:
            return self.db.query(Booking).filter(Booking.id == booking_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Booking lookup failed | id={booking_id} | {e}")
            raise PersistenceFailure("Booking store unavailable")

    def get(self, booking_id: int) -> Booking:
        booking = self.find(booking_id)
        if not booking:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return booking

    def add(self, booking: Booking) -> Booking:
        try:
            self.db.add(booking)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Booking insert failed: {e}")
            raise PersistenceFailure("Booking store unavailable")
        return booking

    def update(self, booking_id: int, changes: BaseModel) -> Booking:
        """Write only the fields explicitly set on `changes`."""
        booking = self.get(booking_id)

        for field, value in changes.model_dump(exclude_unset=True).items():
            if not hasattr(Booking, field):
                continue
            setattr(booking, field, value)

        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Booking update failed | id={booking_id} | {e}")
            raise PersistenceFailure("Booking store unavailable")
        return booking


# ---------------------------------------------------------------------
# PAYMENTS
# ---------------------------------------------------------------------
@dataclass
class InsertResult:
    created: bool
    record: Payment


class PaymentStore(SqlStore):
    def get_by_key(self, order_id: str, transaction_id: str) -> Payment | None:
        return self.db.query(Payment).filter(
            Payment.order_id == order_id,
            Payment.transaction_id == transaction_id,
        ).first()

    def get_by_transaction(self, transaction_id: str) -> Payment | None:
        try:
            return self.db.query(Payment).filter(
                Payment.transaction_id == transaction_id
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Payment lookup failed | txn={transaction_id} | {e}")
            raise PersistenceFailure("Payment store unavailable")

    def insert_if_absent(self, order_id: str, transaction_id: str, record: Payment) -> InsertResult:
        """Insert `record` unless (order_id, transaction_id) is already stored.

        The unique constraints decide races: the loser of a concurrent insert
        gets an IntegrityError and reads back the winner's record. Must be the
        first write of the unit of work, since losing rolls the session back.
        """
        try:
            existing = self.get_by_key(order_id, transaction_id)
            if existing:
                return InsertResult(created=False, record=existing)

            record.order_id = order_id
            record.transaction_id = transaction_id
            self.db.add(record)
            self.db.flush()
            return InsertResult(created=True, record=record)

        except IntegrityError:
            self.db.rollback()
            try:
                existing = self.get_by_key(order_id, transaction_id)
            except SQLAlchemyError as e:
                logger.error(f"Payment re-read failed | txn={transaction_id} | {e}")
                raise PersistenceFailure("Payment store unavailable")
            if existing:
                return InsertResult(created=False, record=existing)
            logger.bind(log_type="payment").error(
                f"Payment key clash | order={order_id} | txn={transaction_id}"
            )
            raise PaymentConflict(
                "Order or transaction already recorded against a different payment"
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Payment insert failed | txn={transaction_id} | {e}")
            raise PersistenceFailure("Payment store unavailable")
