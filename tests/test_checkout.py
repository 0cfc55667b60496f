from decimal import Decimal

import pytest

from common.exceptions import (
    EmptyCartError, InvalidCartDataError, MissingDeliveryAddressError, MissingPaymentMethodError,
)
from config.database import SessionLocal
from modules.cart.models import CartItem
from modules.cart.service import cart_service
from modules.order.models import Order
from modules.order.service import order_service
from modules.system.service import get_setting_from_db, LAST_ORDER_ID
from modules.user.models import User
from tests.conftest import get_csrf, sign_in


def _fill_cart(db, user, lines):
    for product_id, price, quantity in lines:
        for _ in range(quantity):
            cart_service.add_item(db, user.id, product_id, f"Product {product_id}", price)
    db.commit()


# ==========================================
# Service
# ==========================================

def test_checkout_commits_order_and_clears_cart(db, make_user):
    user = make_user(membership="silver")
    _fill_cart(db, user, [(1, 10, 2), (2, 5, 1)])

    order = order_service.checkout(db, user, "  1 High Street ", "card")
    db.commit()

    assert order.id == 1
    assert order.username == "alice"
    assert order.subtotal == Decimal("25.00")
    assert order.shipping == Decimal("2.25")
    assert order.total == Decimal("27.25")
    assert order.membership == "silver"
    assert order.delivery_address == "1 High Street"
    assert order.payment_method == "card"
    assert [(it.product_id, it.quantity, it.line_total) for it in order.items] == [
        (1, 2, Decimal("20.00")),
        (2, 1, Decimal("5.00")),
    ]
    assert cart_service.get_items(db, user.id) == []
    assert get_setting_from_db(db, LAST_ORDER_ID) == "1"


def test_checkout_credits_points(db, make_user):
    user = make_user(membership="silver")
    _fill_cart(db, user, [(1, 50, 2), (2, 25, 1)])

    order = order_service.checkout(db, user, "1 High Street", "paypal")
    db.commit()

    assert order.total == Decimal("127.25")
    assert order.shipping == Decimal("2.25")
    assert order.points_earned == 1
    db.refresh(user)
    assert user.points == 1


def test_empty_cart_never_creates_order(db, make_user):
    user = make_user()
    with pytest.raises(EmptyCartError):
        order_service.checkout(db, user, "1 High Street", "card")
    db.rollback()
    assert db.query(Order).count() == 0
    assert get_setting_from_db(db, LAST_ORDER_ID, "0") == "0"


@pytest.mark.parametrize("address,method,error", [
    ("", "card", MissingDeliveryAddressError),
    ("   ", "card", MissingDeliveryAddressError),
    ("1 High Street", "", MissingPaymentMethodError),
    ("1 High Street", "bitcoin", MissingPaymentMethodError),
])
def test_checkout_requires_address_and_payment(db, make_user, address, method, error):
    user = make_user()
    _fill_cart(db, user, [(1, 10, 1)])

    with pytest.raises(error):
        order_service.checkout(db, user, address, method)
    db.rollback()

    assert db.query(Order).count() == 0
    assert cart_service.get_count(db, user.id) == 1


def test_order_ids_strictly_increase_across_users(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob", membership="platinum")

    ids = []
    for user in (alice, bob, alice, bob, alice):
        _fill_cart(db, user, [(7, 3, 1)])
        ids.append(order_service.checkout(db, user, "Somewhere", "cash_on_delivery").id)
        db.commit()

    assert ids == [1, 2, 3, 4, 5]
    assert [o.id for o in order_service.get_user_orders(db, "alice")] == [1, 3, 5]
    assert [o.id for o in order_service.get_user_orders(db, "bob")] == [2, 4]
    assert get_setting_from_db(db, LAST_ORDER_ID) == "5"


def test_invalid_cart_is_discarded(db, make_user, monkeypatch):
    user = make_user()
    _fill_cart(db, user, [(1, 10, 1)])

    real_get_items = cart_service.get_items

    def corrupt_items(session, user_id):
        real_get_items(session, user_id)
        return [{"id": 1, "title": "Backpack", "price": "10", "quantity": 1}]

    monkeypatch.setattr(cart_service, "get_items", corrupt_items)
    with pytest.raises(InvalidCartDataError):
        order_service.checkout(db, user, "1 High Street", "card")
    db.commit()
    monkeypatch.undo()

    assert cart_service.get_items(db, user.id) == []
    assert db.query(Order).count() == 0


def test_preview_prices_cart_without_committing(db, make_user):
    user = make_user(membership="gold")
    _fill_cart(db, user, [(1, 10, 2)])

    totals = order_service.preview(db, user)
    assert totals.subtotal == Decimal("20.00")
    assert totals.shipping == Decimal("1.00")
    assert cart_service.get_count(db, user.id) == 2
    assert db.query(Order).count() == 0


# ==========================================
# Routes
# ==========================================

def _add(client, product_id, title, price):
    token = get_csrf(client, "/checkout")
    client.post(
        "/cart/add",
        data={"product_id": product_id, "title": title, "price": price, "csrf_token": token},
        follow_redirects=False,
    )


def test_checkout_page_with_empty_cart(auth_client):
    page = auth_client.get("/checkout")
    assert page.status_code == 200
    assert "Your cart is empty. Add items before proceeding to checkout." in page.text
    assert "confirm-order" not in page.text


def test_checkout_page_shows_summary(auth_client):
    _add(auth_client, "1", "Backpack", "10")
    _add(auth_client, "1", "Backpack", "10")
    _add(auth_client, "2", "T-Shirt", "5")

    page = auth_client.get("/checkout")
    assert "Subtotal: £25.00" in page.text
    assert "Shipping: £3.00" in page.text
    assert "Total: £28.00" in page.text


def test_checkout_confirm_flow(auth_client):
    _add(auth_client, "1", "Backpack", "109.95")
    token = get_csrf(auth_client, "/checkout")

    resp = auth_client.post(
        "/checkout",
        data={"delivery_address": "1 High Street", "payment_method": "card", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/profile"

    profile = auth_client.get("/profile")
    assert "Order #1 confirmed! Thank you." in profile.text
    assert "<strong>Order ID:</strong> 1" in profile.text
    assert "£110.95" in profile.text
    assert "Credit / Debit Card" in profile.text
    assert "Points Earned:</strong> 1 points" in profile.text
    assert "Backpack (x1) - £109.95" in profile.text

    with SessionLocal() as s:
        assert s.query(User).filter(User.username == "alice").one().points == 1

    assert auth_client.get("/api/cart").json()["cart_count"] == 0


def test_checkout_confirm_missing_address(auth_client):
    _add(auth_client, "1", "Backpack", "10")
    token = get_csrf(auth_client, "/checkout")

    resp = auth_client.post(
        "/checkout",
        data={"delivery_address": "", "payment_method": "card", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/checkout"

    page = auth_client.get("/checkout")
    assert "Please enter a delivery address." in page.text
    assert auth_client.get("/api/cart").json()["cart_count"] == 1


def test_checkout_confirm_empty_cart(auth_client):
    token = get_csrf(auth_client, "/checkout")
    auth_client.post(
        "/checkout",
        data={"delivery_address": "1 High Street", "payment_method": "card", "csrf_token": token},
    )
    with SessionLocal() as s:
        assert s.query(Order).count() == 0


def test_profile_without_orders(auth_client):
    page = auth_client.get("/profile")
    assert "You have no orders yet." in page.text


def test_orders_api(auth_client):
    _add(auth_client, "2", "T-Shirt", "22.30")
    token = get_csrf(auth_client, "/checkout")
    auth_client.post(
        "/checkout",
        data={"delivery_address": "1 High Street", "payment_method": "paypal", "csrf_token": token},
    )

    body = auth_client.get("/api/orders").json()
    assert body["points"] == 0
    assert len(body["orders"]) == 1
    order = body["orders"][0]
    assert order["id"] == 1
    assert order["total"] == "23.30"
    assert order["shipping"] == "1.00"
    assert order["items"] == [{"id": 2, "title": "T-Shirt", "price": "22.30", "quantity": 1}]


def _corrupt_cart(monkeypatch):
    real_get_items = cart_service.get_items

    def corrupt_items(session, user_id):
        real_get_items(session, user_id)
        return [{"id": 1, "title": "Backpack", "price": None, "quantity": 1}]

    monkeypatch.setattr(cart_service, "get_items", corrupt_items)


def test_checkout_page_discards_invalid_cart(auth_client, monkeypatch):
    _add(auth_client, "1", "Backpack", "10")
    _corrupt_cart(monkeypatch)

    page = auth_client.get("/checkout")
    monkeypatch.undo()

    assert page.status_code == 200
    assert "Cart data is invalid. Please try adding items again." in page.text
    with SessionLocal() as s:
        assert s.query(CartItem).count() == 0


def test_checkout_confirm_discards_invalid_cart(auth_client, monkeypatch):
    _add(auth_client, "1", "Backpack", "10")
    token = get_csrf(auth_client, "/checkout")
    _corrupt_cart(monkeypatch)

    resp = auth_client.post(
        "/checkout",
        data={"delivery_address": "1 High Street", "payment_method": "card", "csrf_token": token},
        follow_redirects=False,
    )
    monkeypatch.undo()

    assert resp.status_code == 303
    assert resp.headers["location"] == "/checkout"
    with SessionLocal() as s:
        assert s.query(CartItem).count() == 0
        assert s.query(Order).count() == 0
    page = auth_client.get("/checkout")
    assert "Cart data is invalid. Please try adding items again." in page.text


def test_profile_shows_effective_tier_for_unknown_membership(client, make_user):
    make_user("carol", "secret", membership="diamond")
    assert sign_in(client, "carol").status_code == 303

    page = client.get("/profile")
    assert "carol (bronze)" in page.text
    assert "Membership: Bronze" in page.text
    assert "Diamond" not in page.text
