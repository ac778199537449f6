"""Checkout / payment flow for one cart."""
import asyncio
import logging
from decimal import Decimal
from typing import Dict, Optional, Protocol

from teapos.core.errors import (
    CheckoutInProgressError,
    NetworkError,
    PaymentError,
    POSError,
    ValidationError,
)
from teapos.services.checkout.payment import (
    PaymentMethod,
    PaymentProcessor,
    PaymentStatus,
    PaymentTransaction,
    default_processors,
)
from teapos.services.checkout.state import CheckoutState, Failed, Idle, Submitting, Succeeded
from teapos.services.ordering.cart import Cart
from teapos.services.ordering.models import OrderRecord
from teapos.services.ordering.pricing import MoneyLike, compute_change, to_money

logger = logging.getLogger(__name__)


class OrderSubmitter(Protocol):
    """Anything that can store a submitted order, e.g. OrderPersistenceService."""

    async def submit_order(self, order: OrderRecord) -> OrderRecord:
        ...

    async def record_payment_attempt(self, transaction: PaymentTransaction) -> None:
        ...


class CheckoutFlow:
    """Moves a cart through ``idle -> submitting -> succeeded | failed``.

    Only one submission may be outstanding. The check for ``Submitting`` and
    the switch into it happen with no ``await`` in between, so two checkout
    requests on the same event loop can never both get through. The cart is
    locked for the whole submission, and payment plus storing the order
    share one ``timeout_seconds`` deadline.
    """

    def __init__(
        self,
        cart: Cart,
        processors: Optional[Dict[PaymentMethod, PaymentProcessor]] = None,
        timeout_seconds: float = 15.0,
    ):
        self.cart = cart
        self.processors = processors or default_processors()
        self.timeout_seconds = timeout_seconds
        self.state: CheckoutState = Idle()

    @property
    def is_submitting(self) -> bool:
        return isinstance(self.state, Submitting)

    def _processor(self, method: PaymentMethod) -> PaymentProcessor:
        try:
            return self.processors[method]
        except KeyError:
            raise PaymentError(f"{method.display_name} payments are not accepted")

    def change_due(self, cash_received: MoneyLike) -> Decimal:
        """Change for a cash payment; negative while the cash is short."""
        return compute_change(to_money(cash_received), self.cart.total())

    def can_checkout(self, method: PaymentMethod, cash_received: Optional[MoneyLike] = None) -> bool:
        """Whether the checkout button should be enabled."""
        if self.cart.is_empty or self.is_submitting or method not in self.processors:
            return False
        received = to_money(cash_received) if cash_received is not None else None
        return self.processors[method].can_process(self.cart.total(), received)

    def _begin(self, method: PaymentMethod, cash_received: Optional[Decimal]) -> PaymentProcessor:
        # Must stay synchronous: this is the mutual-exclusion gate
        if self.is_submitting:
            raise CheckoutInProgressError("A checkout is already being submitted")
        if self.cart.is_empty:
            raise ValidationError("Cart is empty")
        processor = self._processor(method)
        if not processor.can_process(self.cart.total(), cash_received):
            raise PaymentError("Cash received does not cover the total")
        self.state = Submitting(payment_method=method)
        self.cart.locked = True
        return processor

    async def _record_declined(
        self, submitter: OrderSubmitter, transaction: PaymentTransaction, timeout: float
    ) -> None:
        """Keep the declined attempt; failing to do so does not change the outcome."""
        try:
            await asyncio.wait_for(submitter.record_payment_attempt(transaction), timeout=timeout)
        except (POSError, asyncio.TimeoutError) as e:
            logger.warning(f"[CHECKOUT] Could not record declined payment {transaction.id}: {e}")

    async def submit(
        self,
        submitter: OrderSubmitter,
        method: PaymentMethod,
        cash_received: Optional[MoneyLike] = None,
    ) -> CheckoutState:
        """Pay for and submit the cart.

        Guard failures (already submitting, empty cart, not enough cash)
        raise without leaving the current state. Everything after the guard
        ends in ``Succeeded`` or ``Failed``; a failure keeps the cart intact.
        """
        received = to_money(cash_received) if cash_received is not None else None
        processor = self._begin(method, received)

        items = self.cart.items
        subtotal, tax, total = self.cart.subtotal(), self.cart.tax(), self.cart.total()
        transaction: Optional[PaymentTransaction] = None
        logger.info(f"[CHECKOUT] Submitting {len(items)} items, total {total}, via {method}")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds

        def remaining() -> float:
            return max(deadline - loop.time(), 0.0)

        try:
            transaction = await asyncio.wait_for(
                processor.process(total, received), timeout=remaining()
            )
            if transaction.status is PaymentStatus.FAILED:
                await self._record_declined(submitter, transaction, remaining())
                raise PaymentError(transaction.error_message or "Payment failed")

            order = OrderRecord(
                items=tuple(items),
                subtotal=subtotal,
                tax=tax,
                total=total,
                payment_method=method,
                payment_status=transaction.status,
                cash_received=transaction.cash_received,
                change_given=transaction.change_given,
                transaction=transaction,
            )
            stored = await asyncio.wait_for(submitter.submit_order(order), timeout=remaining())
        except asyncio.TimeoutError:
            step = "Order submission" if transaction is not None else "Payment"
            error = NetworkError(f"{step} timed out after {self.timeout_seconds:g}s")
            logger.error(f"[CHECKOUT] {error.description}")
            self.state = Failed(reason=error.description, error_kind=error.kind, transaction=transaction)
            return self.state
        except POSError as e:
            logger.error(f"[CHECKOUT] Checkout failed - {e.description}")
            self.state = Failed(reason=e.description, error_kind=e.kind, transaction=transaction)
            return self.state
        except Exception as e:
            logger.error(f"[CHECKOUT] Unexpected error: {type(e).__name__}: {e}", exc_info=True)
            self.state = Failed(
                reason=f"Unknown Error: {e}", error_kind="unknown", transaction=transaction
            )
            raise
        finally:
            self.cart.locked = False

        self.cart.clear()
        self.state = Succeeded(order=stored)
        logger.info(f"[CHECKOUT] Order {stored.id} submitted (#{stored.order_number})")
        return self.state

    def acknowledge(self) -> CheckoutState:
        """Dismiss a success or error result and return to idle."""
        if self.is_submitting:
            raise CheckoutInProgressError("Cannot dismiss a checkout that is still submitting")
        self.state = Idle()
        return self.state
