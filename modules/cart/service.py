"""
Cart Module - Service Layer
==============================
Staged cart management: add (merge by product id), list, count, clear.
"""

import logging
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy.orm import Session
from sqlalchemy import func

from common.exceptions import ValidationError
from common.helpers import safe_int, safe_decimal, quantize_money
from modules.cart.models import CartItem

logger = logging.getLogger("storefront.cart")

# Column limits: product_id is Integer, price is Numeric(12, 2)
MIN_PRODUCT_ID = -(2 ** 31)
MAX_PRODUCT_ID = 2 ** 31 - 1
MAX_PRICE = Decimal("9999999999.99")


class CartService:

    def add_item(self, db: Session, user_id: int, product_id, title: str, price) -> Tuple[CartItem, int]:
        """
        Add one unit of a product to the user's cart.
        An existing line for the same product id is incremented instead of duplicated.

        product_id and price may arrive as strings (form fields); they are
        normalized to int / Decimal.

        Returns: (cart_item, total_cart_count)
        Raises ValidationError if product_id or price is not numeric or does
        not fit its column. The price is stored rounded to the cent.
        """
        pid = safe_int(product_id)
        unit_price = safe_decimal(price)
        if pid is None or not MIN_PRODUCT_ID <= pid <= MAX_PRODUCT_ID:
            raise ValidationError("Invalid product id.")
        if unit_price is None or not 0 <= unit_price <= MAX_PRICE:
            raise ValidationError("Invalid product price.")
        unit_price = min(quantize_money(unit_price), MAX_PRICE)

        item = db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == pid,
        ).first()

        if item:
            item.quantity += 1
        else:
            item = CartItem(
                user_id=user_id,
                product_id=pid,
                title=(title or "").strip(),
                price=unit_price,
                quantity=1,
            )
            db.add(item)

        db.flush()
        return item, self.get_count(db, user_id)

    def get_items(self, db: Session, user_id: int) -> List[CartItem]:
        """Cart lines in the order they were first added."""
        return (
            db.query(CartItem)
            .filter(CartItem.user_id == user_id)
            .order_by(CartItem.id)
            .all()
        )

    def get_count(self, db: Session, user_id: int) -> int:
        """Total units in the cart (sum of quantities)."""
        return db.query(
            func.coalesce(func.sum(CartItem.quantity), 0)
        ).filter(CartItem.user_id == user_id).scalar() or 0

    def get_subtotal(self, db: Session, user_id: int) -> Decimal:
        return sum((it.line_total for it in self.get_items(db, user_id)), Decimal("0"))

    def clear_cart(self, db: Session, user_id: int) -> int:
        """Remove all items from the user's cart. Returns number of lines removed."""
        deleted = db.query(CartItem).filter(CartItem.user_id == user_id).delete()
        db.flush()
        return deleted


# Singleton
cart_service = CartService()
