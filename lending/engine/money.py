"""Decimal helpers shared by the engine."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: object) -> Decimal | None:
    """Coerce ``value`` to a finite Decimal, or ``None`` if it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def to_money(value: Decimal) -> Decimal:
    """Quantize to cents, rounding half up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)
