from decimal import Decimal, ROUND_HALF_UP

from app.core.constants import Money


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value if value is not None else 0))


def quantize_money(value) -> Decimal:
    """Round to currency minor units (2 places, half-up)."""
    return to_decimal(value).quantize(Money.PLACES, rounding=ROUND_HALF_UP)
