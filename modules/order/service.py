"""
Order Module - Service Layer
===============================
Checkout (validate → price → allocate id → persist → clear cart)
and order history.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from common.exceptions import (
    InvalidCartDataError, MissingDeliveryAddressError, MissingPaymentMethodError,
)
from common.helpers import quantize_money
from modules.cart.service import cart_service
from modules.order.models import Order, OrderItem, PaymentMethod
from modules.pricing.calculator import CartTotals, calculate_cart_totals, points_for_order
from modules.system.service import next_sequence_value, LAST_ORDER_ID
from modules.user.models import User

logger = logging.getLogger("storefront.order")


def build_order_item(cart_item) -> OrderItem:
    """Create an OrderItem snapshot from a cart line."""
    return OrderItem(
        product_id=cart_item.product_id,
        title=cart_item.title,
        unit_price=quantize_money(cart_item.price),
        quantity=cart_item.quantity,
        line_total=quantize_money(cart_item.price * cart_item.quantity),
    )


def parse_payment_method(value: Optional[str]) -> PaymentMethod:
    """Raises MissingPaymentMethodError for blank or unknown values."""
    try:
        return PaymentMethod((value or "").strip())
    except ValueError:
        raise MissingPaymentMethodError()


class OrderService:

    # ==========================================
    # Pricing preview
    # ==========================================

    def preview(self, db: Session, user: User) -> CartTotals:
        """
        Price the user's staged cart for the checkout summary.

        Raises EmptyCartError if the cart is empty.
        Raises InvalidCartDataError after discarding a corrupt cart.
        """
        items = cart_service.get_items(db, user.id)
        return self._price(db, user, items)

    # ==========================================
    # Checkout
    # ==========================================

    def checkout(
        self, db: Session, user: User,
        delivery_address: str = "", payment_method: str = "",
    ) -> Order:
        """
        Commit the user's cart as an order:
        1. Validate and price the cart (membership-tier shipping)
        2. Validate delivery address and payment method
        3. Allocate the next order id (last_order_id + 1)
        4. Snapshot cart lines into the order and credit loyalty points
        5. Clear the cart

        All writes share the caller's transaction; the caller commits.

        Raises EmptyCartError, InvalidCartDataError (cart discarded),
        MissingDeliveryAddressError, MissingPaymentMethodError.
        """
        items = cart_service.get_items(db, user.id)
        totals = self._price(db, user, items)

        address = (delivery_address or "").strip()
        if not address:
            raise MissingDeliveryAddressError()
        method = parse_payment_method(payment_method)

        order_id = next_sequence_value(db, LAST_ORDER_ID)
        order = Order(
            id=order_id,
            user_id=user.id,
            username=user.username,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            total=totals.total,
            membership=totals.membership.value,
            delivery_address=address,
            payment_method=method.value,
        )
        order.items = [build_order_item(it) for it in items]
        db.add(order)

        points = points_for_order(totals.total, totals.shipping)
        user.points = (user.points or 0) + points

        cart_service.clear_cart(db, user.id)
        db.flush()

        logger.info(
            f"Order #{order.id} committed for {user.username}: "
            f"total={totals.total} shipping={totals.shipping} points=+{points}"
        )
        return order

    # ==========================================
    # Queries
    # ==========================================

    def get_user_orders(self, db: Session, username: str) -> List[Order]:
        return (
            db.query(Order)
            .filter(Order.username == username)
            .order_by(Order.id)
            .all()
        )

    # ==========================================
    # Private helpers
    # ==========================================

    def _price(self, db: Session, user: User, items) -> CartTotals:
        try:
            return calculate_cart_totals(items, user.membership)
        except InvalidCartDataError:
            removed = cart_service.clear_cart(db, user.id)
            logger.warning(f"Discarded invalid cart for {user.username} ({removed} lines)")
            raise


# Singleton
order_service = OrderService()
