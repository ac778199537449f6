"""Order models."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from teapos.core.errors import ValidationError
from teapos.services.catalog.base import Money
from teapos.services.checkout.payment import PaymentMethod, PaymentStatus, PaymentTransaction
from teapos.services.ordering.pricing import line_price, line_unit_price
from teapos.services.ordering.status import OrderStatus


class OrderLineItem(BaseModel):
    """One customized product in a cart or order.

    Everything needed to price the row is copied in when the item is built,
    so later catalog changes never reach a row that is already in a cart.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    menu_item_id: Optional[str] = None
    name: str
    base_price: Money
    size: str
    size_price: Money
    sugar: str
    ice: str
    toppings: Tuple[str, ...] = ()
    topping_prices: Tuple[Money, ...] = ()
    quantity: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _toppings_match_prices(self) -> "OrderLineItem":
        if len(self.toppings) != len(self.topping_prices):
            raise ValueError("Each topping needs exactly one price")
        return self

    @computed_field(return_type=Money)  # type: ignore[misc]
    @property
    def unit_price(self) -> Decimal:
        return line_unit_price(self.base_price, self.size_price, self.topping_prices)

    @computed_field(return_type=Money)  # type: ignore[misc]
    @property
    def price(self) -> Decimal:
        return line_price(self.unit_price, self.quantity)

    def with_quantity(self, quantity: int) -> "OrderLineItem":
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        return self.model_copy(update={"quantity": quantity})

    @property
    def modifiers_summary(self) -> str:
        parts = [self.size, self.sugar, self.ice, *self.toppings]
        return ", ".join(p for p in parts if p)


class OrderRecord(BaseModel):
    """Immutable snapshot of a cart at submission time."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    order_number: Optional[int] = None
    items: Tuple[OrderLineItem, ...]
    subtotal: Money
    tax: Money
    total: Money
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PENDING
    cash_received: Optional[Money] = None
    change_given: Optional[Money] = None
    transaction: Optional[PaymentTransaction] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
