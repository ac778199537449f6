"""Unit tests for device sessions."""
import asyncio
import pytest

from teapos.core.errors import CheckoutInProgressError, NotFoundError, ValidationError
from teapos.services.checkout.payment import PaymentMethod
from teapos.services.ordering.models import OrderLineItem


def make_item():
    return OrderLineItem(
        name="Green Tea",
        base_price="12.00",
        size="Small",
        size_price="0.00",
        sugar="Recommended",
        ice="Normal",
    )


class SlowSubmitter:
    async def submit_order(self, order):
        await asyncio.sleep(0.05)
        return order


class TestSessionRegistry:
    """Test opening and closing sessions."""

    def test_open_returns_same_session(self, session_registry):
        first = session_registry.open("ipad-1")

        assert session_registry.open("ipad-1") is first
        assert session_registry.get("ipad-1") is first

    def test_sessions_have_separate_carts(self, session_registry):
        session_registry.open("ipad-1").cart.add(make_item())

        assert session_registry.open("ipad-2").cart.is_empty

    @pytest.mark.parametrize("device_id", ["", "../etc", "a b", "x" * 65, "ipad-1\n"])
    def test_invalid_device_id(self, session_registry, device_id):
        with pytest.raises(ValidationError):
            session_registry.open(device_id)

    def test_get_unknown(self, session_registry):
        with pytest.raises(NotFoundError):
            session_registry.get("ipad-1")

    def test_reopen_restores_cart(self, session_registry):
        session_registry.open("ipad-1").cart.add(make_item())
        session_registry.close("ipad-1")

        restored = session_registry.open("ipad-1")

        assert len(restored.cart) == 1
        assert restored.cart.items[0].name == "Green Tea"

    @pytest.mark.asyncio
    async def test_cart_locked_while_submitting(self, session_registry):
        session = session_registry.open("ipad-1")
        session.cart.add(make_item())

        task = asyncio.create_task(session.checkout.submit(SlowSubmitter(), PaymentMethod.CARD))
        await asyncio.sleep(0.01)

        with pytest.raises(CheckoutInProgressError):
            session.ensure_cart_editable()
        with pytest.raises(CheckoutInProgressError):
            session_registry.close("ipad-1")

        await task
        session.ensure_cart_editable()
        assert session.cart.is_empty

    @pytest.mark.asyncio
    async def test_add_started_before_checkout_is_refused(self, session_registry):
        session = session_registry.open("ipad-1")
        session.cart.add(make_item())
        submitter = SlowSubmitter()

        # The add passes its early check, then waits on catalog lookups
        session.ensure_cart_editable()
        task = asyncio.create_task(session.checkout.submit(submitter, PaymentMethod.CARD))
        await asyncio.sleep(0.01)

        with pytest.raises(CheckoutInProgressError):
            session.cart.add(make_item())

        state = await task
        assert [item.name for item in state.order.items] == ["Green Tea"]
        assert session.cart.is_empty
        session.cart.add(make_item())
        assert len(session.cart) == 1
