"""POS sessions: one cart and one checkout flow per device."""
import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional

from teapos.core.errors import CheckoutInProgressError, NotFoundError, ValidationError
from teapos.services.checkout.flow import CheckoutFlow
from teapos.services.checkout.payment import Terminal, default_processors
from teapos.services.ordering.cart import Cart
from teapos.services.ordering.cart_store import CartStore

logger = logging.getLogger(__name__)

_DEVICE_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


class PosSession:
    """State of one tablet: its cart and the checkout flow bound to it."""

    def __init__(self, device_id: str, cart: Cart, checkout: CheckoutFlow):
        self.device_id = device_id
        self.cart = cart
        self.checkout = checkout

    def ensure_cart_editable(self) -> None:
        """The cart is frozen while its checkout is being submitted."""
        if self.checkout.is_submitting:
            raise CheckoutInProgressError("Cart cannot change while checkout is submitting")


class SessionRegistry:
    """Creates sessions and hands the same session back for the same device."""

    def __init__(
        self,
        storage_dir: Path,
        tax_rate: Decimal,
        checkout_timeout_seconds: float,
        terminal: Optional[Terminal] = None,
    ):
        self.storage_dir = Path(storage_dir)
        self.tax_rate = tax_rate
        self.checkout_timeout_seconds = checkout_timeout_seconds
        self.terminal = terminal
        self._sessions: Dict[str, PosSession] = {}

    def _store_for(self, device_id: str) -> CartStore:
        return CartStore(self.storage_dir / f"{device_id}.json")

    def open(self, device_id: str) -> PosSession:
        """Return the device's session, restoring its saved cart on first open."""
        if not _DEVICE_ID.fullmatch(device_id or ""):
            raise ValidationError("Device id must be 1-64 letters, digits, '-' or '_'")
        session = self._sessions.get(device_id)
        if session is None:
            cart = Cart.restore(self.tax_rate, self._store_for(device_id))
            checkout = CheckoutFlow(
                cart,
                processors=default_processors(self.terminal),
                timeout_seconds=self.checkout_timeout_seconds,
            )
            session = PosSession(device_id, cart, checkout)
            self._sessions[device_id] = session
            logger.info(f"[SESSION] Opened session for device {device_id}")
        return session

    def get(self, device_id: str) -> PosSession:
        session = self._sessions.get(device_id)
        if session is None:
            raise NotFoundError(f"No open session for device {device_id}")
        return session

    def close(self, device_id: str) -> None:
        """Forget the session; its saved cart stays on disk for the next open."""
        session = self.get(device_id)
        session.ensure_cart_editable()
        del self._sessions[device_id]
        logger.info(f"[SESSION] Closed session for device {device_id}")
