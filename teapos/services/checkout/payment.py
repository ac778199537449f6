"""Payment methods, transactions and processors.

The card reader or wallet integration is outside this service: a non-cash
processor only needs a yes/no "processed" answer from its terminal.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from teapos.core.errors import PaymentError
from teapos.services.catalog.base import Money
from teapos.services.ordering.pricing import compute_change, to_money

logger = logging.getLogger(__name__)


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"
    GIFT_CARD = "gift_card"
    QLUB = "qlub"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return {
            PaymentMethod.CASH: "Cash",
            PaymentMethod.CARD: "Card",
            PaymentMethod.MOBILE: "Mobile",
            PaymentMethod.GIFT_CARD: "Gift Card",
            PaymentMethod.QLUB: "Qlub",
        }[self]


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class PaymentTransaction(BaseModel):
    """Result of one payment attempt. Never retried automatically."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    amount: Money
    method: PaymentMethod
    status: PaymentStatus
    reference: Optional[str] = None
    cash_received: Optional[Money] = None
    change_given: Optional[Money] = None
    error_message: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _reference(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class PaymentProcessor(ABC):
    """Turns an amount into a PaymentTransaction for one method."""

    method: PaymentMethod

    def can_process(self, amount: Decimal, cash_received: Optional[Decimal] = None) -> bool:
        return True

    @abstractmethod
    async def process(
        self, amount: Decimal, cash_received: Optional[Decimal] = None
    ) -> PaymentTransaction:
        pass


class CashPaymentProcessor(PaymentProcessor):
    """Cash is complete once the received amount covers the total."""

    method = PaymentMethod.CASH

    def can_process(self, amount: Decimal, cash_received: Optional[Decimal] = None) -> bool:
        if cash_received is None:
            return False
        return compute_change(to_money(cash_received), amount) >= 0

    async def process(
        self, amount: Decimal, cash_received: Optional[Decimal] = None
    ) -> PaymentTransaction:
        if cash_received is None:
            raise PaymentError("Enter the cash amount received")
        received = to_money(cash_received)
        change = compute_change(received, amount)
        if change < 0:
            raise PaymentError(
                f"Cash received {received:.2f} is less than the total {to_money(amount):.2f}"
            )
        return PaymentTransaction(
            amount=amount,
            method=self.method,
            status=PaymentStatus.SUCCESS,
            reference=_reference("CASH"),
            cash_received=received,
            change_given=change,
        )


Terminal = Callable[[PaymentMethod, Decimal], Awaitable[bool]]


async def _always_processed(method: PaymentMethod, amount: Decimal) -> bool:
    return True


class ExternalPaymentProcessor(PaymentProcessor):
    """Card, mobile and other non-cash methods.

    ``terminal`` reports whether the external device processed the payment.
    The default treats every payment as processed immediately.
    """

    def __init__(self, method: PaymentMethod, terminal: Optional[Terminal] = None):
        if method is PaymentMethod.CASH:
            raise ValueError("Use CashPaymentProcessor for cash payments")
        self.method = method
        self.terminal = terminal or _always_processed

    async def process(
        self, amount: Decimal, cash_received: Optional[Decimal] = None
    ) -> PaymentTransaction:
        processed = await self.terminal(self.method, amount)
        if not processed:
            logger.warning(f"[PAYMENT] {self.method.display_name} payment of {amount} declined")
            return PaymentTransaction(
                amount=amount,
                method=self.method,
                status=PaymentStatus.FAILED,
                reference=_reference("FAIL"),
                error_message=f"{self.method.display_name} payment was declined",
            )
        return PaymentTransaction(
            amount=amount,
            method=self.method,
            status=PaymentStatus.SUCCESS,
            reference=_reference("TXN"),
        )


def default_processors(terminal: Optional[Terminal] = None) -> Dict[PaymentMethod, PaymentProcessor]:
    """One processor per payment method."""
    processors: Dict[PaymentMethod, PaymentProcessor] = {
        PaymentMethod.CASH: CashPaymentProcessor()
    }
    for method in PaymentMethod:
        if method is not PaymentMethod.CASH:
            processors[method] = ExternalPaymentProcessor(method, terminal)
    return processors
