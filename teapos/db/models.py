"""Database models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, ForeignKey, Text, JSON, Numeric, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Menu category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    menu_items = relationship("MenuItem", back_populates="category", cascade="all, delete-orphan")


class MenuItem(Base):
    """Menu item model."""

    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String, nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="menu_items")


class SizeOption(Base):
    """Size modifier model."""

    __tablename__ = "size_options"

    id = Column(String(36), primary_key=True, default=_new_id)
    label = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ToppingOption(Base):
    """Topping modifier model."""

    __tablename__ = "topping_options"

    id = Column(String(36), primary_key=True, default=_new_id)
    label = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Order(Base):
    """Submitted order snapshot."""

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("business_date", "order_number", name="uq_orders_business_date_number"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    order_number = Column(Integer, nullable=False)  # restarts at 1 each business_date
    business_date = Column(Date, nullable=False)  # UTC day of created_at
    status = Column(String, default="pending", nullable=False)  # see OrderStatus
    payment_method = Column(String, nullable=False)
    payment_status = Column(String, default="pending", nullable=False)  # pending, success, failed
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    cash_received = Column(Numeric(10, 2), nullable=True)
    change_given = Column(Numeric(10, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    transactions = relationship("PaymentTransaction", back_populates="order")


class OrderItem(Base):
    """Line item frozen into an order."""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    menu_item_id = Column(String(36), nullable=True)  # copied, not a live reference
    name = Column(String, nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False)
    size = Column(String, nullable=False)
    size_price = Column(Numeric(10, 2), nullable=False)
    sugar = Column(String, nullable=False)
    ice = Column(String, nullable=False)
    toppings = Column(JSON, nullable=False, default=list)
    topping_prices = Column(JSON, nullable=False, default=list)  # decimal strings
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")


class PaymentTransaction(Base):
    """One payment attempt."""

    __tablename__ = "payment_transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String, nullable=False)
    status = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    cash_received = Column(Numeric(10, 2), nullable=True)
    change_given = Column(Numeric(10, 2), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="transactions")
