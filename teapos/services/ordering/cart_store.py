"""Local persisted snapshot of the current cart."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from teapos.services.ordering.models import OrderLineItem

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "current_cart"


class CartStore:
    """Small JSON key-value file holding one device's cart.

    This is a cache, not a durable store: a write lost to a crash only
    means the cart is not restored on the next start.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read().strip()
        if not text:
            return {}
        data = json.loads(text)
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)

    def save_cart(self, items: List[OrderLineItem]) -> None:
        """Overwrite the stored cart snapshot."""
        data = self._read_or_empty()
        data[CART_STORAGE_KEY] = [item.model_dump(mode="json") for item in items]
        self._write(data)

    def load_cart(self) -> List[OrderLineItem]:
        """Return the stored cart, or an empty list if nothing usable is stored."""
        try:
            rows = self._read().get(CART_STORAGE_KEY, [])
            return [OrderLineItem.model_validate(row) for row in rows]
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"[CART] Ignoring unreadable cart snapshot {self.path}: {e}")
            return []

    def _read_or_empty(self) -> Dict[str, Any]:
        try:
            return self._read()
        except (OSError, ValueError):
            return {}
