# storefront/utils/money.py

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

Money = Decimal
CENT = Decimal("0.01")

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x: Money) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def parse_money(x) -> Money | None:
    """User input -> rounded Decimal, or None when it is not a finite number."""
    if x is None or isinstance(x, bool):
        return None
    try:
        value = Decimal(str(x).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return round_money(value)

def line_total(unit_price, quantity: int) -> Money:
    return round_money(D(unit_price) * quantity)

def sum_lines(lines) -> Money:
    """lines: iterable of (unit_price, quantity)."""
    return round_money(sum((D(price) * qty for price, qty in lines), Decimal("0")))
