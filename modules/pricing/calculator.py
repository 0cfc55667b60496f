"""
Pricing Module - Calculator
=============================
Cart subtotal, membership-tier shipping, and total.

Shipping is charged per unit, not per order:
    shipping = rate(tier) * sum(quantity)
"""

from dataclasses import dataclass
from decimal import Decimal
from math import floor
from typing import Any, Iterable, Mapping

from common.exceptions import EmptyCartError, InvalidCartDataError
from common.helpers import is_number, quantize_money
from modules.user.models import MembershipTier


# Per-item shipping rate, non-increasing from bronze to platinum
SHIPPING_RATES = {
    MembershipTier.BRONZE: Decimal("1.00"),
    MembershipTier.SILVER: Decimal("0.75"),
    MembershipTier.GOLD: Decimal("0.50"),
    MembershipTier.PLATINUM: Decimal("0.00"),
}

POINTS_DIVISOR = 100


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    item_count: int
    rate: Decimal
    membership: MembershipTier


def shipping_rate(membership) -> Decimal:
    """Per-item shipping rate for a tier name; unknown tiers pay the bronze rate."""
    return SHIPPING_RATES[MembershipTier.parse(membership)]


def _field(item: Any, name: str):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _line(item: Any):
    """Extract (price, quantity) from a cart line, validating both."""
    if item is None:
        raise InvalidCartDataError()
    price = _field(item, "price")
    quantity = _field(item, "quantity")
    if not is_number(price) or not is_number(quantity):
        raise InvalidCartDataError()
    if quantity != int(quantity) or quantity < 1:
        raise InvalidCartDataError()
    return Decimal(str(price)), int(quantity)


def calculate_cart_totals(items: Iterable[Any], membership=None) -> CartTotals:
    """
    Price a cart for a membership tier.

    Args:
        items: Cart lines (ORM objects or mappings) with `price` and `quantity`
        membership: Tier name or MembershipTier; missing/unknown means bronze

    Returns:
        CartTotals with money fields rounded to 2 decimal places

    Raises:
        EmptyCartError: No lines at all
        InvalidCartDataError: A line has a non-numeric price or a quantity
            that is not a whole number >= 1
    """
    items = list(items or [])
    if not items:
        raise EmptyCartError()

    tier = MembershipTier.parse(membership)
    rate = SHIPPING_RATES[tier]

    subtotal = Decimal("0")
    item_count = 0
    for item in items:
        price, quantity = _line(item)
        subtotal += price * quantity
        item_count += quantity

    shipping = rate * item_count
    return CartTotals(
        subtotal=quantize_money(subtotal),
        shipping=quantize_money(shipping),
        total=quantize_money(subtotal + shipping),
        item_count=item_count,
        rate=rate,
        membership=tier,
    )


def points_for_order(total, shipping) -> int:
    """
    Loyalty points earned by an order: floor((total - shipping) / 100).

    `total` is the grand total including shipping, so this is floor(subtotal / 100).
    Passing a subtotal as `total` would deduct shipping twice.
    """
    spent = Decimal(str(total)) - Decimal(str(shipping))
    return floor(spent / POINTS_DIVISOR)
