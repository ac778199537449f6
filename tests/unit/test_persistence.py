"""Unit tests for order persistence."""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from teapos.core.errors import DataError, InvalidStatusTransition, NotFoundError
from teapos.services.checkout.payment import (
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
)
from teapos.services.ordering.models import OrderLineItem, OrderRecord
from teapos.services.ordering.status import OrderStatus
from teapos.services.persistence.orders import OrderPersistenceService


def make_order(*names, quantity=1, method=PaymentMethod.CARD):
    items = tuple(
        OrderLineItem(
            menu_item_id=f"id-{name}",
            name=name,
            base_price="12.00",
            size="Large",
            size_price="6.00",
            sugar="Less",
            ice="No Ice",
            toppings=("Extra Shot", "Whipped Cream"),
            topping_prices=("5.00", "2.00"),
            quantity=quantity,
        )
        for name in names
    )
    subtotal = sum((item.price for item in items), Decimal("0.00"))
    tax = (subtotal * Decimal("0.08")).quantize(Decimal("0.01"))
    return OrderRecord(
        items=items,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        payment_method=method,
        payment_status=PaymentStatus.SUCCESS,
        transaction=PaymentTransaction(
            amount=subtotal + tax,
            method=method,
            status=PaymentStatus.SUCCESS,
            reference="TXN-TEST",
        ),
    )


class TestOrderPersistence:
    """Test storing and reading orders."""

    @pytest.mark.asyncio
    async def test_submit_and_get(self, test_db):
        service = OrderPersistenceService(test_db)
        order = make_order("Fragrant Black Tea", "Matcha Latte")

        stored = await service.submit_order(order)
        loaded = await service.get_order(order.id)

        assert stored.order_number == 1
        assert loaded.id == order.id
        assert loaded.order_number == 1
        assert loaded.items == order.items
        assert loaded.total == order.total
        assert loaded.status is OrderStatus.PENDING
        assert loaded.payment_status is PaymentStatus.SUCCESS
        assert loaded.transaction.reference == "TXN-TEST"

    @pytest.mark.asyncio
    async def test_line_items_keep_modifiers_and_prices(self, test_db):
        service = OrderPersistenceService(test_db)
        order = make_order("Fragrant Black Tea", quantity=2)

        await service.submit_order(order)
        item = (await service.get_order(order.id)).items[0]

        assert item.toppings == ("Extra Shot", "Whipped Cream")
        assert item.topping_prices == (Decimal("5.00"), Decimal("2.00"))
        assert item.unit_price == Decimal("25.00")
        assert item.price == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_order_numbers_are_sequential(self, test_db):
        service = OrderPersistenceService(test_db)

        first = await service.submit_order(make_order("A"))
        second = await service.submit_order(make_order("B"))

        assert (first.order_number, second.order_number) == (1, 2)

    @pytest.mark.asyncio
    async def test_order_numbers_restart_each_day(self, test_db):
        service = OrderPersistenceService(test_db)
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)

        old = await service.submit_order(make_order("A").model_copy(update={"created_at": yesterday}))
        today = await service.submit_order(make_order("B"))

        assert (old.order_number, today.order_number) == (1, 1)

    @pytest.mark.asyncio
    async def test_taken_number_is_renumbered(self, test_db, monkeypatch):
        service = OrderPersistenceService(test_db)
        await service.submit_order(make_order("A"))
        next_number = service.next_order_number
        stale = [1]

        # Another device stored #1 after this one picked its number
        async def stale_then_fresh(business_date=None):
            return stale.pop() if stale else await next_number(business_date)

        monkeypatch.setattr(service, "next_order_number", stale_then_fresh)
        second = await service.submit_order(make_order("B"))

        assert second.order_number == 2
        assert (await service.get_order(second.id)).order_number == 2
        assert len(await service.list_orders()) == 2

    @pytest.mark.asyncio
    async def test_explicit_duplicate_number_is_rejected(self, test_db):
        service = OrderPersistenceService(test_db)
        await service.submit_order(make_order("A"))

        with pytest.raises(DataError, match="already taken"):
            await service.submit_order(make_order("B").model_copy(update={"order_number": 1}))

        assert len(await service.list_orders()) == 1

    @pytest.mark.asyncio
    async def test_get_missing_order(self, test_db):
        service = OrderPersistenceService(test_db)

        with pytest.raises(NotFoundError):
            await service.get_order("missing")

    @pytest.mark.asyncio
    async def test_list_orders_filters_by_status(self, test_db):
        service = OrderPersistenceService(test_db)
        first = await service.submit_order(make_order("A"))
        await service.submit_order(make_order("B"))
        await service.update_status(first.id, OrderStatus.CANCELLED)

        all_orders = await service.list_orders()
        cancelled = await service.list_orders(status=OrderStatus.CANCELLED)

        assert len(all_orders) == 2
        assert [o.id for o in cancelled] == [first.id]

    @pytest.mark.asyncio
    async def test_list_orders_limit(self, test_db):
        service = OrderPersistenceService(test_db)
        for name in ("A", "B", "C"):
            await service.submit_order(make_order(name))

        assert len(await service.list_orders(limit=2)) == 2


class TestOrderStatus:
    """Test the fulfillment lifecycle."""

    @pytest.mark.asyncio
    async def test_allowed_transitions(self, test_db):
        service = OrderPersistenceService(test_db)
        order = await service.submit_order(make_order("A"))

        for status in (OrderStatus.IN_PROGRESS, OrderStatus.READY, OrderStatus.COMPLETED):
            order = await service.update_status(order.id, status)

        assert order.status is OrderStatus.COMPLETED
        assert (await service.get_order(order.id)).status is OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_terminal_status_cannot_change(self, test_db):
        service = OrderPersistenceService(test_db)
        order = await service.submit_order(make_order("A"))
        await service.update_status(order.id, OrderStatus.CANCELLED)

        with pytest.raises(InvalidStatusTransition):
            await service.update_status(order.id, OrderStatus.IN_PROGRESS)

    @pytest.mark.asyncio
    async def test_payment_status_is_independent(self, test_db):
        service = OrderPersistenceService(test_db)
        order = await service.submit_order(make_order("A"))

        updated = await service.update_payment_status(order.id, PaymentStatus.FAILED)

        assert updated.payment_status is PaymentStatus.FAILED
        assert updated.status is OrderStatus.PENDING


class TestSalesSummary:
    """Test the analytics figures."""

    @pytest.mark.asyncio
    async def test_summary(self, test_db):
        service = OrderPersistenceService(test_db)
        kept = await service.submit_order(make_order("Matcha Latte", "Da Jia"))
        await service.submit_order(make_order("Matcha Latte", quantity=3))
        cancelled = await service.submit_order(make_order("Da Jia", quantity=5))
        await service.update_status(cancelled.id, OrderStatus.CANCELLED)
        await service.update_status(kept.id, OrderStatus.COMPLETED)

        summary = await service.sales_summary()

        assert summary.order_count == 3
        # 2 x 25.00 + 8% and 3 x 25.00 + 8%
        assert summary.revenue == Decimal("54.00") + Decimal("81.00")
        assert summary.status_counts == {
            OrderStatus.PENDING: 1,
            OrderStatus.COMPLETED: 1,
            OrderStatus.CANCELLED: 1,
        }
        assert summary.top_items == [("Matcha Latte", 4), ("Da Jia", 1)]

    @pytest.mark.asyncio
    async def test_empty_summary(self, test_db):
        summary = await OrderPersistenceService(test_db).sales_summary()

        assert summary.order_count == 0
        assert summary.revenue == Decimal("0.00")
        assert summary.top_items == []


class TestPaymentAttempts:
    """Test payments stored without an order."""

    @pytest.mark.asyncio
    async def test_declined_payment_is_stored(self, test_db):
        service = OrderPersistenceService(test_db)
        await service.submit_order(make_order("A"))
        declined = PaymentTransaction(
            amount="49.68",
            method=PaymentMethod.CARD,
            status=PaymentStatus.FAILED,
            reference="FAIL-TEST",
            error_message="Card payment was declined",
        )

        await service.record_payment_attempt(declined)
        attempts = await service.list_payment_attempts()

        assert [a.id for a in attempts] == [declined.id]
        assert attempts[0].status is PaymentStatus.FAILED
        assert attempts[0].amount == Decimal("49.68")
        assert attempts[0].error_message == "Card payment was declined"
