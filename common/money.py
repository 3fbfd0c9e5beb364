from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

CENTS = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds.
MAX_AMOUNT = Decimal("9999999999.99")

# Quantities are stored in a 32-bit Integer column.
MAX_QUANTITY = 2_147_483_647


def to_money(value: Any) -> Optional[Decimal]:
    """
    Parse a price into a cent-quantised Decimal.
    Returns None for anything that is not a finite number (None, "", "abc", NaN, Infinity)
    or whose magnitude does not fit a stored amount.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None
    if abs(amount) > MAX_AMOUNT:
        return None
    return amount


def within_amount_limit(amount: Decimal) -> bool:
    return abs(amount) <= MAX_AMOUNT


def valid_quantity(quantity: Any) -> bool:
    """Positive int (not bool) that fits the quantity column."""
    return not isinstance(quantity, bool) and isinstance(quantity, int) and 0 < quantity <= MAX_QUANTITY


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * unit_price).quantize(CENTS, rounding=ROUND_HALF_UP)


def money_sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0.00")).quantize(CENTS, rounding=ROUND_HALF_UP)
