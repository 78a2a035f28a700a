from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from gigboard.core.errors import ValidationError

TWO_PLACES = Decimal("0.01")
# Numeric(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")


def parse_positive_amount(value: Any, message: str) -> Decimal:
    """
    Accepts numbers and numeric strings; anything else, non-finite values
    and amounts that are not strictly positive after rounding to cents
    raise ValidationError(message).
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(message)
    raw = value.strip() if isinstance(value, str) else value
    if raw == "":
        raise ValidationError(message)
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(message)
    # bound before quantizing: huge exponents overflow the decimal context
    if not amount.is_finite() or amount > MAX_AMOUNT:
        raise ValidationError(message)

    try:
        amount = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(message)
    if amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError(message)
    return amount
