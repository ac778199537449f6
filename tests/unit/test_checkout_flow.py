"""Unit tests for the checkout flow."""
import asyncio
import pytest
from decimal import Decimal

from teapos.core.errors import (
    CheckoutInProgressError,
    NetworkError,
    PaymentError,
    ValidationError,
)
from teapos.services.checkout.flow import CheckoutFlow
from teapos.services.checkout.payment import PaymentMethod, PaymentStatus, default_processors
from teapos.services.checkout.state import Failed, Idle, Submitting, Succeeded
from teapos.services.ordering.cart import Cart
from teapos.services.ordering.models import OrderLineItem


def make_item(name="Fragrant Black Tea"):
    return OrderLineItem(
        name=name,
        base_price="12.00",
        size="Large",
        size_price="6.00",
        sugar="Recommended",
        ice="Normal",
        toppings=("Extra Shot",),
        topping_prices=("5.00",),
    )


class FakeSubmitter:
    """Records submitted orders; optionally slow or failing."""

    def __init__(self, delay=0.0, error=None):
        self.delay = delay
        self.error = error
        self.orders = []
        self.payment_attempts = []

    async def submit_order(self, order):
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.orders.append(order)
        return order.model_copy(update={"order_number": len(self.orders)})

    async def record_payment_attempt(self, transaction):
        self.payment_attempts.append(transaction)


@pytest.fixture
def cart():
    cart = Cart(Decimal("0.08"))
    cart.add(make_item("A"))
    cart.add(make_item("B"))
    return cart


@pytest.fixture
def flow(cart):
    return CheckoutFlow(cart, timeout_seconds=1.0)


class TestCheckoutSuccess:
    """Test successful submissions."""

    @pytest.mark.asyncio
    async def test_card_checkout(self, flow, cart):
        submitter = FakeSubmitter()
        expected_items = cart.items

        state = await flow.submit(submitter, PaymentMethod.CARD)

        assert isinstance(state, Succeeded)
        assert flow.state is state
        assert list(state.order.items) == expected_items
        assert state.order.total == Decimal("49.68")
        assert state.order.payment_status is PaymentStatus.SUCCESS
        assert state.order.order_number == 1
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_cash_checkout_gives_change(self, flow):
        state = await flow.submit(FakeSubmitter(), PaymentMethod.CASH, Decimal("50.00"))

        assert isinstance(state, Succeeded)
        assert state.order.cash_received == Decimal("50.00")
        assert state.order.change_given == Decimal("0.32")
        assert state.order.transaction.reference.startswith("CASH-")

    @pytest.mark.asyncio
    async def test_acknowledge_returns_to_idle(self, flow):
        await flow.submit(FakeSubmitter(), PaymentMethod.MOBILE)

        assert isinstance(flow.acknowledge(), Idle)


class TestCheckoutGuards:
    """Test requests rejected before anything is submitted."""

    @pytest.mark.asyncio
    async def test_short_cash_is_blocked(self, flow, cart):
        submitter = FakeSubmitter()

        assert not flow.can_checkout(PaymentMethod.CASH, Decimal("40.00"))
        with pytest.raises(PaymentError):
            await flow.submit(submitter, PaymentMethod.CASH, Decimal("40.00"))

        assert isinstance(flow.state, Idle)
        assert submitter.orders == []
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_empty_cart_is_blocked(self):
        flow = CheckoutFlow(Cart(Decimal("0.08")))

        assert not flow.can_checkout(PaymentMethod.CARD)
        with pytest.raises(ValidationError, match="empty"):
            await flow.submit(FakeSubmitter(), PaymentMethod.CARD)

    def test_change_due(self, flow):
        assert flow.change_due(Decimal("50.00")) == Decimal("0.32")
        assert flow.can_checkout(PaymentMethod.CASH, "50")
        assert not flow.can_checkout(PaymentMethod.CASH)

    @pytest.mark.asyncio
    async def test_concurrent_submits_create_one_order(self, flow):
        submitter = FakeSubmitter(delay=0.05)

        results = await asyncio.gather(
            flow.submit(submitter, PaymentMethod.CARD),
            flow.submit(submitter, PaymentMethod.CARD),
            return_exceptions=True,
        )

        assert len(submitter.orders) == 1
        assert sum(isinstance(r, Succeeded) for r in results) == 1
        assert sum(isinstance(r, CheckoutInProgressError) for r in results) == 1

    @pytest.mark.asyncio
    async def test_state_is_submitting_while_in_flight(self, flow):
        submitter = FakeSubmitter(delay=0.05)

        task = asyncio.create_task(flow.submit(submitter, PaymentMethod.CARD))
        await asyncio.sleep(0.01)

        assert isinstance(flow.state, Submitting)
        assert flow.is_submitting
        assert flow.cart.locked
        with pytest.raises(CheckoutInProgressError):
            flow.acknowledge()
        await task
        assert not flow.cart.locked


class TestCheckoutFailure:
    """Test failures after the guard."""

    @pytest.mark.asyncio
    async def test_store_failure_keeps_cart(self, flow, cart):
        submitter = FakeSubmitter(error=NetworkError("Failed to submit order"))

        state = await flow.submit(submitter, PaymentMethod.CARD)

        assert isinstance(state, Failed)
        assert state.error_kind == "network"
        assert "Network Error" in state.reason
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_timeout(self, cart):
        flow = CheckoutFlow(cart, timeout_seconds=0.01)

        state = await flow.submit(FakeSubmitter(delay=1.0), PaymentMethod.CARD)

        assert isinstance(state, Failed)
        assert state.error_kind == "network"
        assert "timed out" in state.reason
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_declined_card(self, cart):
        async def decline(method, amount):
            return False

        flow = CheckoutFlow(cart, processors=default_processors(decline))
        submitter = FakeSubmitter()

        state = await flow.submit(submitter, PaymentMethod.CARD)

        assert isinstance(state, Failed)
        assert state.error_kind == "payment"
        assert state.transaction.status is PaymentStatus.FAILED
        assert submitter.orders == []
        assert submitter.payment_attempts == [state.transaction]
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_is_raised_and_recorded(self, flow, cart):
        submitter = FakeSubmitter(error=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await flow.submit(submitter, PaymentMethod.CARD)

        assert isinstance(flow.state, Failed)
        assert flow.state.error_kind == "unknown"
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, flow, cart):
        await flow.submit(FakeSubmitter(error=NetworkError("down")), PaymentMethod.CARD)

        state = await flow.submit(FakeSubmitter(), PaymentMethod.CARD)

        assert isinstance(state, Succeeded)
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_unanswered_terminal_times_out(self, cart):
        async def never_answers(method, amount):
            await asyncio.sleep(3600)

        flow = CheckoutFlow(cart, processors=default_processors(never_answers), timeout_seconds=0.05)
        submitter = FakeSubmitter()

        state = await asyncio.wait_for(flow.submit(submitter, PaymentMethod.CARD), timeout=1.0)

        assert isinstance(state, Failed)
        assert state.error_kind == "network"
        assert "Payment timed out" in state.reason
        assert state.transaction is None
        assert submitter.orders == []
        assert len(cart) == 2
        assert not cart.locked
        assert isinstance(flow.acknowledge(), Idle)

    @pytest.mark.asyncio
    async def test_payment_and_submission_share_the_deadline(self, cart):
        async def slow_terminal(method, amount):
            await asyncio.sleep(0.15)
            return True

        flow = CheckoutFlow(cart, processors=default_processors(slow_terminal), timeout_seconds=0.2)
        submitter = FakeSubmitter(delay=0.15)

        state = await flow.submit(submitter, PaymentMethod.CARD)

        assert isinstance(state, Failed)
        assert "Order submission timed out" in state.reason
        assert state.transaction.status is PaymentStatus.SUCCESS
        assert len(cart) == 2

    @pytest.mark.asyncio
    async def test_failed_attempt_record_keeps_decline(self, cart):
        async def decline(method, amount):
            return False

        class BrokenLedger(FakeSubmitter):
            async def record_payment_attempt(self, transaction):
                raise NetworkError("down")

        flow = CheckoutFlow(cart, processors=default_processors(decline))

        state = await flow.submit(BrokenLedger(), PaymentMethod.CARD)

        assert isinstance(state, Failed)
        assert state.error_kind == "payment"
        assert len(cart) == 2
