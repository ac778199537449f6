"""Item customization: turns a menu item plus modifiers into a priced line item."""
from decimal import Decimal
from typing import Dict, List, Optional

from teapos.core.errors import ValidationError
from teapos.services.catalog.base import MenuItem, ModifierLevels, SizeOption, ToppingOption
from teapos.services.ordering.models import OrderLineItem
from teapos.services.ordering.pricing import line_price, line_unit_price, to_money


class OrderItemBuilder:
    """Tracks the customization state of a single item."""

    def __init__(self, menu_item: MenuItem, levels: ModifierLevels):
        self.menu_item = menu_item
        self.levels = levels
        self.size: Optional[SizeOption] = None
        self.sugar: str = levels.default_sugar
        self.ice: str = levels.default_ice
        self.quantity = 1
        # Keyed by topping id so re-selecting a topping does not duplicate it
        self._toppings: Dict[str, ToppingOption] = {}

    @property
    def toppings(self) -> List[ToppingOption]:
        return list(self._toppings.values())

    @property
    def can_build(self) -> bool:
        """A size must be chosen before the item can go into the cart."""
        return self.size is not None

    def select_size(self, size: SizeOption) -> None:
        self.size = size

    def set_sugar(self, level: Optional[str]) -> None:
        self.sugar = (level or "").strip() or self.levels.default_sugar

    def set_ice(self, level: Optional[str]) -> None:
        self.ice = (level or "").strip() or self.levels.default_ice

    def add_topping(self, topping: ToppingOption) -> None:
        self._toppings.setdefault(topping.id, topping)

    def remove_topping(self, topping: ToppingOption) -> None:
        self._toppings.pop(topping.id, None)

    def toggle_topping(self, topping: ToppingOption) -> None:
        if topping.id in self._toppings:
            self.remove_topping(topping)
        else:
            self.add_topping(topping)

    def set_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        self.quantity = quantity

    @property
    def price_preview(self) -> Decimal:
        """Price shown while customizing; size counts as zero until chosen."""
        size_price = self.size.price if self.size else to_money(0)
        unit = line_unit_price(
            self.menu_item.price, size_price, [t.price for t in self._toppings.values()]
        )
        return line_price(unit, self.quantity)

    def build(self) -> OrderLineItem:
        """Freeze the current selection into an OrderLineItem."""
        if self.size is None:
            raise ValidationError(f"Choose a size for {self.menu_item.name}")
        toppings = self.toppings
        return OrderLineItem(
            menu_item_id=self.menu_item.id,
            name=self.menu_item.name,
            base_price=self.menu_item.price,
            size=self.size.label,
            size_price=self.size.price,
            sugar=self.sugar,
            ice=self.ice,
            toppings=tuple(t.label for t in toppings),
            topping_prices=tuple(t.price for t in toppings),
            quantity=self.quantity,
        )


def build_line_item(
    menu_item: MenuItem,
    size: Optional[SizeOption],
    levels: ModifierLevels,
    sugar: Optional[str] = None,
    ice: Optional[str] = None,
    toppings: Optional[List[ToppingOption]] = None,
    quantity: int = 1,
) -> OrderLineItem:
    """One-shot form of the builder used by the HTTP layer."""
    builder = OrderItemBuilder(menu_item, levels)
    if size is not None:
        builder.select_size(size)
    builder.set_sugar(sugar)
    builder.set_ice(ice)
    for topping in toppings or []:
        builder.add_topping(topping)
    builder.set_quantity(quantity)
    return builder.build()
