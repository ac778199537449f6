"""Order persistence service."""
import logging
from collections import Counter
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teapos.core.errors import DataError, NetworkError, NotFoundError
from teapos.db.models import Order, OrderItem
from teapos.db.models import PaymentTransaction as PaymentTransactionRecord
from teapos.services.catalog.base import Money
from teapos.services.checkout.payment import PaymentMethod, PaymentStatus, PaymentTransaction
from teapos.services.ordering.models import OrderLineItem, OrderRecord
from teapos.services.ordering.pricing import sum_money
from teapos.services.ordering.status import OrderStatus, ensure_transition

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


class SalesSummary(BaseModel):
    """Figures for the order list's analytics panel."""

    order_count: int
    revenue: Money
    status_counts: Dict[OrderStatus, int]
    top_items: List[Tuple[str, int]]


def _to_line_item(row: OrderItem) -> OrderLineItem:
    return OrderLineItem(
        menu_item_id=row.menu_item_id,
        name=row.name,
        base_price=row.base_price,
        size=row.size,
        size_price=row.size_price,
        sugar=row.sugar,
        ice=row.ice,
        toppings=tuple(row.toppings or ()),
        topping_prices=tuple(row.topping_prices or ()),
        quantity=row.quantity,
    )


def _to_transaction(row: PaymentTransactionRecord) -> PaymentTransaction:
    return PaymentTransaction(
        id=row.id,
        amount=row.amount,
        method=row.method,
        status=row.status,
        reference=row.reference,
        cash_received=row.cash_received,
        change_given=row.change_given,
        error_message=row.error_message,
        timestamp=row.created_at,
    )


def _to_record(order: Order) -> OrderRecord:
    transaction = _to_transaction(order.transactions[-1]) if order.transactions else None
    return OrderRecord(
        id=order.id,
        order_number=order.order_number,
        items=tuple(_to_line_item(row) for row in order.items),
        subtotal=order.subtotal,
        tax=order.tax,
        total=order.total,
        payment_method=PaymentMethod(order.payment_method),
        payment_status=PaymentStatus(order.payment_status),
        status=OrderStatus(order.status),
        cash_received=order.cash_received,
        change_given=order.change_given,
        transaction=transaction,
        created_at=order.created_at,
    )


def _business_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date()


def _transaction_row(tx: PaymentTransaction) -> PaymentTransactionRecord:
    return PaymentTransactionRecord(
        id=tx.id,
        amount=tx.amount,
        method=tx.method.value,
        status=tx.status.value,
        reference=tx.reference,
        cash_received=tx.cash_received,
        change_given=tx.change_given,
        error_message=tx.error_message,
        created_at=tx.timestamp,
    )


def _order_row(order: OrderRecord, order_number: int, business_date: date) -> Order:
    row = Order(
        id=order.id,
        order_number=order_number,
        business_date=business_date,
        status=order.status.value,
        payment_method=order.payment_method.value,
        payment_status=order.payment_status.value,
        subtotal=order.subtotal,
        tax=order.tax,
        total=order.total,
        cash_received=order.cash_received,
        change_given=order.change_given,
        created_at=order.created_at,
    )
    for position, item in enumerate(order.items):
        row.items.append(
            OrderItem(
                position=position,
                menu_item_id=item.menu_item_id,
                name=item.name,
                base_price=item.base_price,
                size=item.size,
                size_price=item.size_price,
                sugar=item.sugar,
                ice=item.ice,
                toppings=list(item.toppings),
                topping_prices=[str(p) for p in item.topping_prices],
                quantity=item.quantity,
                unit_price=item.unit_price,
                price=item.price,
            )
        )
    if order.transaction is not None:
        row.transactions.append(_transaction_row(order.transaction))
    return row


class OrderPersistenceService:
    """Service for persisting order data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, what: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[ORDERS] Failed to {what}: {type(e).__name__}: {e}")
            raise NetworkError(f"Failed to {what}") from e

    async def _load(self, order_id: str) -> Order:
        try:
            result = await self.db.execute(
                select(Order)
                .where(Order.id == order_id)
                .options(selectinload(Order.items), selectinload(Order.transactions))
            )
        except SQLAlchemyError as e:
            raise NetworkError(f"Failed to load order {order_id}") from e
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    async def next_order_number(self, business_date: Optional[date] = None) -> int:
        """Sequential order number, restarting at 1 every (UTC) day."""
        business_date = business_date or _business_date(datetime.now(timezone.utc))
        try:
            result = await self.db.execute(
                select(func.max(Order.order_number)).where(Order.business_date == business_date)
            )
        except SQLAlchemyError as e:
            raise NetworkError("Failed to number order") from e
        return (result.scalar() or 0) + 1

    async def submit_order(self, order: OrderRecord) -> OrderRecord:
        """Store an order, its line items and its payment in one commit.

        Numbers are unique per business day. When another device takes the
        same number first, the order is renumbered and stored again.
        """
        business_date = _business_date(order.created_at)
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            order_number = order.order_number or await self.next_order_number(business_date)
            self.db.add(_order_row(order, order_number, business_date))
            try:
                await self.db.commit()
                break
            except IntegrityError as e:
                await self.db.rollback()
                if order.order_number or attempt == ORDER_NUMBER_ATTEMPTS:
                    logger.error(f"[ORDERS] Failed to submit order {order.id}: {e}")
                    raise DataError(
                        f"Order number {order_number} is already taken for {business_date}"
                    ) from e
                logger.warning(
                    f"[ORDERS] Order number {order_number} for {business_date} already taken, renumbering"
                )
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"[ORDERS] Failed to submit order: {type(e).__name__}: {e}")
                raise NetworkError("Failed to submit order") from e
        logger.info(f"[ORDERS] Stored order {order.id} (#{order_number}) total {order.total}")
        return order.model_copy(update={"order_number": order_number})

    async def record_payment_attempt(self, transaction: PaymentTransaction) -> None:
        """Store a payment that never became an order, e.g. a declined card."""
        self.db.add(_transaction_row(transaction))
        await self._commit("record payment attempt")
        logger.info(
            f"[ORDERS] Recorded {transaction.status} {transaction.method} payment {transaction.id}"
        )

    async def list_payment_attempts(self) -> List[PaymentTransaction]:
        """Payments with no order, newest first."""
        try:
            result = await self.db.execute(
                select(PaymentTransactionRecord)
                .where(PaymentTransactionRecord.order_id.is_(None))
                .order_by(desc(PaymentTransactionRecord.created_at))
            )
        except SQLAlchemyError as e:
            raise NetworkError("Failed to fetch payment attempts") from e
        return [_to_transaction(row) for row in result.scalars().all()]

    async def get_order(self, order_id: str) -> OrderRecord:
        """Get order by ID with items."""
        return _to_record(await self._load(order_id))

    async def list_orders(
        self, status: Optional[OrderStatus] = None, limit: int = 100
    ) -> List[OrderRecord]:
        """Newest first, optionally filtered by status."""
        query = (
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.transactions))
            .order_by(desc(Order.created_at))
            .limit(limit)
        )
        if status is not None:
            query = query.where(Order.status == status.value)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise NetworkError("Failed to fetch orders") from e
        return [_to_record(order) for order in result.scalars().all()]

    async def update_status(self, order_id: str, new_status: OrderStatus) -> OrderRecord:
        """Admin action moving an order along its lifecycle."""
        order = await self._load(order_id)
        current = OrderStatus(order.status)
        ensure_transition(current, new_status)
        order.status = new_status.value
        await self._commit("update order status")
        logger.info(f"[ORDERS] Order {order_id}: {current} -> {new_status}")
        return _to_record(order)

    async def update_payment_status(
        self, order_id: str, payment_status: PaymentStatus
    ) -> OrderRecord:
        """Payment is tracked separately from fulfillment; status is untouched."""
        order = await self._load(order_id)
        order.payment_status = payment_status.value
        await self._commit("update payment status")
        logger.info(f"[ORDERS] Order {order_id} payment status -> {payment_status}")
        return _to_record(order)

    async def sales_summary(self, limit: int = 1000) -> SalesSummary:
        """Revenue excludes cancelled orders; top items count units sold."""
        orders = await self.list_orders(limit=limit)
        status_counts: Dict[OrderStatus, int] = Counter(order.status for order in orders)
        sold = [order for order in orders if order.status is not OrderStatus.CANCELLED]
        item_counts: Counter = Counter()
        for order in sold:
            for item in order.items:
                item_counts[item.name] += item.quantity
        revenue: Decimal = sum_money(order.total for order in sold)
        return SalesSummary(
            order_count=len(orders),
            revenue=revenue,
            status_counts=dict(status_counts),
            top_items=item_counts.most_common(5),
        )
