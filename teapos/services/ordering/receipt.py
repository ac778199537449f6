"""Plain-text receipt for a submitted order."""
from decimal import Decimal
from typing import List

from teapos.services.ordering.models import OrderRecord
from teapos.services.ordering.pricing import format_money

WIDTH = 40

# Modifier values that are the house default are left off the receipt
_DEFAULT_SUGAR = {"", "Normal", "Recommended"}
_DEFAULT_ICE = {"", "Normal", "Normal Ice"}


def _row(label: str, value: str) -> str:
    label = label[: WIDTH - len(value) - 1]
    return f"{label}{value.rjust(WIDTH - len(label))}"


def render_receipt(
    order: OrderRecord,
    store_name: str,
    tax_rate: Decimal,
    currency_symbol: str = "$",
) -> str:
    """Render the receipt handed to the customer."""
    def money(amount: Decimal) -> str:
        return format_money(amount, currency_symbol)

    rule = "-" * WIDTH
    lines: List[str] = [
        "=" * WIDTH,
        store_name.upper().center(WIDTH),
        "=" * WIDTH,
        f"Date: {order.created_at:%Y-%m-%d %H:%M}",
        f"Order #: {order.order_number if order.order_number is not None else '-'}",
        f"Order ID: {order.id[:8].upper()}",
    ]
    if order.transaction and order.transaction.reference:
        lines.append(f"Transaction: {order.transaction.reference}")

    lines += [rule, "ITEMS:", rule]
    for item in order.items:
        qty = f"{item.quantity}x " if item.quantity > 1 else ""
        lines.append(_row(f"{qty}{item.name}", money(item.price)))
        if item.size:
            lines.append(f"  Size: {item.size}")
        if item.sugar not in _DEFAULT_SUGAR:
            lines.append(f"  Sugar: {item.sugar}")
        if item.ice not in _DEFAULT_ICE:
            lines.append(f"  Ice: {item.ice}")
        if item.toppings:
            lines.append(f"  Toppings: {', '.join(item.toppings)}")

    rate = (Decimal(str(tax_rate)) * 100).normalize()
    lines += [
        rule,
        _row("Subtotal:", money(order.subtotal)),
        _row(f"Tax ({rate:f}%):", money(order.tax)),
        rule,
        _row("TOTAL:", money(order.total)),
        "",
        f"Payment Method: {order.payment_method.display_name}",
        f"Payment Status: {order.payment_status.value.title()}",
    ]
    if order.cash_received is not None:
        lines.append(_row("Cash:", money(order.cash_received)))
        lines.append(_row("Change:", money(order.change_given or Decimal("0"))))
    lines += [
        "=" * WIDTH,
        f"Thank you for choosing {store_name}!".center(WIDTH),
        "=" * WIDTH,
    ]
    return "\n".join(lines)
