"""Money arithmetic for line items, carts and cash payments.

All amounts are ``Decimal`` values quantized to cents. Floats coming from
JSON or admin forms go through ``to_money`` via their string form so that
``12.99`` stays ``12.99``.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from teapos.core.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """Convert a number (or numeric string) to a cent-quantized Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_price(value: MoneyLike) -> Decimal:
    """Parse an admin-entered price; negative prices are rejected."""
    amount = to_money(value)
    if amount < ZERO:
        raise ValidationError(f"Price cannot be negative: {value!r}")
    return amount


def line_unit_price(
    base_price: Decimal, size_price: Decimal, topping_prices: Iterable[Decimal]
) -> Decimal:
    """Price of one unit: base + size delta + all topping deltas."""
    return to_money(base_price + size_price + sum(topping_prices, ZERO))


def line_price(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(unit_price * quantity)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    return to_money(sum(amounts, ZERO))


def compute_tax(subtotal: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax on a subtotal, rounded half-up to the cent."""
    return to_money(subtotal * Decimal(str(tax_rate)))


def compute_change(received: Decimal, total: Decimal) -> Decimal:
    """Change due for a cash payment; negative means not enough cash."""
    return to_money(received - total)


def format_money(amount: Decimal, symbol: str = "$") -> str:
    return f"{symbol}{to_money(amount):.2f}"
