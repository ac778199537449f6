"""Checkout state: exactly one of Idle, Submitting, Succeeded or Failed."""
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from teapos.services.checkout.payment import PaymentMethod, PaymentTransaction
from teapos.services.ordering.models import OrderRecord


class Idle(BaseModel):
    kind: Literal["idle"] = "idle"


class Submitting(BaseModel):
    kind: Literal["submitting"] = "submitting"
    payment_method: PaymentMethod
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Succeeded(BaseModel):
    kind: Literal["succeeded"] = "succeeded"
    order: OrderRecord


class Failed(BaseModel):
    """Terminal for this attempt; the cart is kept so the user can press again."""

    kind: Literal["failed"] = "failed"
    reason: str
    error_kind: str
    transaction: Optional[PaymentTransaction] = None


CheckoutState = Annotated[
    Union[Idle, Submitting, Succeeded, Failed], Field(discriminator="kind")
]
