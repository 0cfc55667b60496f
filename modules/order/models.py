"""
Order Module - Models
======================
Committed orders with a full snapshot of the cart lines and pricing.
Orders are append-only: never updated or deleted after commit.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, Numeric, Text,
    ForeignKey, DateTime,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from modules.pricing.calculator import points_for_order


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"

    @property
    def label(self) -> str:
        labels = {
            PaymentMethod.CARD: "Credit / Debit Card",
            PaymentMethod.PAYPAL: "PayPal",
            PaymentMethod.CASH_ON_DELIVERY: "Cash on Delivery",
        }
        return labels[self]


class Order(Base):
    __tablename__ = "orders"

    # Allocated from the last_order_id counter, not autoincrement
    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    username = Column(String(150), nullable=False, index=True)

    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    membership = Column(String, nullable=False)

    delivery_address = Column(Text, nullable=True)
    payment_method = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User")
    items = relationship(
        "OrderItem", back_populates="order",
        cascade="all, delete-orphan", order_by="OrderItem.id",
    )

    @property
    def points_earned(self) -> int:
        return points_for_order(self.total, self.shipping)

    @property
    def payment_method_label(self) -> str:
        if not self.payment_method:
            return "Not selected"
        try:
            return PaymentMethod(self.payment_method).label
        except ValueError:
            return self.payment_method

    def __repr__(self):
        return f"<Order #{self.id} {self.username} total={self.total}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False, default="")

    # Snapshot at checkout time
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
