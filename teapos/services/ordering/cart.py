"""Cart of line items for one checkout session."""
import logging
from decimal import Decimal
from typing import List, Optional

from teapos.core.errors import CheckoutInProgressError
from teapos.services.ordering.cart_store import CartStore
from teapos.services.ordering.models import OrderLineItem
from teapos.services.ordering.pricing import compute_tax, sum_money, to_money

logger = logging.getLogger(__name__)


class Cart:
    """Ordered line items with subtotal, tax and total.

    Rows are identified only by position: adding the same customization
    twice gives two rows. Every mutation is written through to the store.
    While ``locked`` (a checkout is submitting this cart) every mutation is
    refused.
    """

    def __init__(self, tax_rate: Decimal, store: Optional[CartStore] = None):
        self.tax_rate = Decimal(str(tax_rate))
        self.store = store
        self.locked = False
        self._items: List[OrderLineItem] = []

    @classmethod
    def restore(cls, tax_rate: Decimal, store: CartStore) -> "Cart":
        """Rebuild the cart saved by a previous run."""
        cart = cls(tax_rate, store)
        cart._items = store.load_cart()
        if cart._items:
            logger.info(f"[CART] Restored {len(cart._items)} items from {store.path}")
        return cart

    @property
    def items(self) -> List[OrderLineItem]:
        return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._items)

    def _ensure_unlocked(self) -> None:
        if self.locked:
            raise CheckoutInProgressError("Cart cannot change while checkout is submitting")

    def add(self, item: OrderLineItem) -> None:
        self._ensure_unlocked()
        self._items.append(item)
        self._persist()

    def remove_at(self, index: int) -> Optional[OrderLineItem]:
        """Remove the row at ``index``; out-of-range indexes do nothing."""
        self._ensure_unlocked()
        if not self._in_range(index):
            return None
        removed = self._items.pop(index)
        self._persist()
        return removed

    def update_quantity(self, index: int, quantity: int) -> Optional[OrderLineItem]:
        """Re-price one row for a new quantity; ignored when out of range or < 1."""
        self._ensure_unlocked()
        if not self._in_range(index) or quantity < 1:
            return None
        self._items[index] = self._items[index].with_quantity(quantity)
        self._persist()
        return self._items[index]

    def clear(self) -> None:
        self._ensure_unlocked()
        self._items = []
        self._persist()

    def subtotal(self) -> Decimal:
        return sum_money(item.price for item in self._items)

    def tax(self) -> Decimal:
        return compute_tax(self.subtotal(), self.tax_rate)

    def total(self) -> Decimal:
        return to_money(self.subtotal() + self.tax())

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save_cart(self._items)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"[CART] Could not save cart snapshot to {self.store.path}: {e}")
