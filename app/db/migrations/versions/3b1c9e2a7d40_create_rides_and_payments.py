"""Create vehicle rates, bookings and payments

Revision ID: 3b1c9e2a7d40
Revises:
Create Date: 2026-10-19 10:12:05.418233

"""
from alembic import op
import sqlalchemy as sa


revision = "3b1c9e2a7d40"
down_revision = None
branch_labels = None
depends_on = None


payment_method_enum = sa.Enum("cod", "advanced", "online", name="paymentmethod")
payment_status_enum = sa.Enum("pending", "paid", "completed", name="paymentstatus")
trip_status_enum = sa.Enum("pending", "in_progress", "completed", name="tripstatus")
record_status_enum = sa.Enum("success", "failed", "pending", name="paymentrecordstatus")


def upgrade():
    # 1️⃣ Vehicle rates
    op.create_table(
        "vehicle_rates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("car_name", sa.String(), nullable=False, unique=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("base_fare", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("per_km_rate", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_vehicle_rates_id", "vehicle_rates", ["id"])

    # 2️⃣ Bookings
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("mobile", sa.String(), nullable=False),
        sa.Column("passengers", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("ride_date", sa.Date(), nullable=False),
        sa.Column("ride_time", sa.String(), nullable=False),
        sa.Column("pickup_address", sa.String(), nullable=False),
        sa.Column("drop_address", sa.String(), nullable=False),
        sa.Column("origin", sa.String(), nullable=False),
        sa.Column("destination", sa.String(), nullable=False),
        sa.Column("distance_km", sa.Numeric(10, 3), nullable=False),
        sa.Column("distance_text", sa.String(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_text", sa.String(), nullable=True),
        sa.Column("vehicle_rate_id", sa.Integer(), nullable=True),
        sa.Column("car_name", sa.String(), nullable=False),
        sa.Column("base_fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("per_km_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", payment_method_enum, nullable=False, server_default="online"),
        sa.Column("payment_status", payment_status_enum, nullable=False, server_default="pending"),
        sa.Column("advance_payment", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("balance_payment", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("razorpay_order_id", sa.String(), nullable=True),
        sa.Column("trip_status", trip_status_enum, nullable=False, server_default="pending"),
        sa.Column("driver_assigned", sa.String(), nullable=False, server_default="Not Assigned"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_email", "bookings", ["email"])
    op.create_index("ix_bookings_razorpay_order_id", "bookings", ["razorpay_order_id"])

    # 3️⃣ Payments (unique keys carry the idempotency guarantee)
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.String(), nullable=False),
        sa.Column("transaction_id", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("amount_minor", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("status", record_status_enum, nullable=False, server_default="success"),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("contact", sa.String(), nullable=True),
        sa.Column("ride_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("order_id", "transaction_id", name="uq_payment_order_transaction"),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_order_id", "payments", ["order_id"], unique=True)
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"], unique=True)
    op.create_index("ix_payments_ride_id", "payments", ["ride_id"])


def downgrade():
    op.drop_table("payments")
    op.drop_table("bookings")
    op.drop_table("vehicle_rates")

    # Drop ENUM types (no-op outside PostgreSQL)
    bind = op.get_bind()
    record_status_enum.drop(bind, checkfirst=True)
    trip_status_enum.drop(bind, checkfirst=True)
    payment_status_enum.drop(bind, checkfirst=True)
    payment_method_enum.drop(bind, checkfirst=True)
