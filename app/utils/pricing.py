from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from app.core.errors import InvalidInput, InvalidAmount

PAISE = Decimal("0.01")
MINOR_UNITS = 100


def _as_decimal(value, field: str) -> Decimal:
    if value is None:
        raise InvalidInput(f"{field} is required")
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{field} must be a number")
    if not number.is_finite():
        raise InvalidInput(f"{field} must be finite")
    if number < 0:
        raise InvalidInput(f"{field} cannot be negative")
    return number


def compute_fare(base_fare, per_km_rate, distance) -> Decimal:
    """total = base_fare + per_km_rate * distance, exact (no rounding)."""
    base = _as_decimal(base_fare, "base_fare")
    rate = _as_decimal(per_km_rate, "per_km_rate")
    km = _as_decimal(distance, "distance")

    return base + rate * km


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """170.00 -> 17000. Rejects non-positive and sub-paise amounts."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount("amount is required")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmount("amount must be a number")
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("amount must be positive")

    minor = value * MINOR_UNITS
    if minor != minor.to_integral_value():
        raise InvalidAmount("amount cannot have more than 2 decimal places")
    return int(minor)


def from_minor_units(amount_minor: int) -> Decimal:
    return (Decimal(amount_minor) / MINOR_UNITS).quantize(PAISE)
