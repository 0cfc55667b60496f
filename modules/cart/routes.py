"""
Cart & Checkout Routes
========================
Add to cart (form + API), cart summary API, checkout page, order confirmation.
"""

from typing import Optional, Dict, Any

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse, JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.templating import render_page
from common.security import csrf_check
from common.flash import flash, flash_error
from common.helpers import safe_next_url
from common.exceptions import (
    StorefrontError, ValidationError, EmptyCartError, InvalidCartDataError, raise_http,
)
from modules.auth.deps import require_login
from modules.cart.service import cart_service
from modules.order.models import PaymentMethod
from modules.order.service import order_service


router = APIRouter(tags=["cart"])


def _referer_path(request: Request) -> str:
    """Path part of the Referer header, for redirecting back to the shop page."""
    from urllib.parse import urlparse
    referer = request.headers.get("referer", "")
    if not referer:
        return "/"
    parsed = urlparse(referer)
    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query
    return safe_next_url(path)


# ==========================================
# ➕ Add to Cart (Form-based, from shop page)
# ==========================================

@router.post("/cart/add")
async def add_to_cart_form(
    request: Request,
    product_id: str = Form(""),
    title: str = Form(""),
    price: str = Form(""),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    csrf_check(request, csrf_token)
    try:
        cart_service.add_item(db, me.id, product_id, title, price)
        db.commit()
        flash(request, f"{title.strip()} added to your cart.")
    except ValidationError as e:
        db.rollback()
        flash_error(request, e.message)

    return RedirectResponse(_referer_path(request), status_code=303)


# ==========================================
# ➕ Add to Cart (API, for AJAX)
# ==========================================

@router.post("/api/cart/add")
async def api_add_to_cart(
    data: Dict[str, Any],
    request: Request,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    csrf_check(request, request.headers.get("X-CSRF-Token"))

    try:
        item, cart_count = cart_service.add_item(
            db, me.id, data.get("id"), str(data.get("title") or ""), data.get("price"),
        )
        db.commit()
    except ValidationError as e:
        db.rollback()
        raise_http(e, 400)

    return JSONResponse({
        "status": "success",
        "message": f"{item.title} added to your cart.",
        "quantity": item.quantity,
        "cart_count": cart_count,
    })


@router.get("/api/cart")
async def api_cart(
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    items = cart_service.get_items(db, me.id)
    return {
        "items": [it.to_dict() for it in items],
        "cart_count": sum(it.quantity for it in items),
        "subtotal": str(cart_service.get_subtotal(db, me.id)),
    }


# ==========================================
# ✅ Checkout - Summary Page
# ==========================================

@router.get("/checkout", response_class=HTMLResponse)
async def checkout_page(
    request: Request,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    totals, error = None, None
    try:
        totals = order_service.preview(db, me)
    except EmptyCartError as e:
        error = e.message
    except InvalidCartDataError as e:
        # Corrupt cart was discarded; persist that
        db.commit()
        error = e.message

    items = cart_service.get_items(db, me.id) if totals else []
    return render_page(request, "shop/checkout.html", {
        "user": me,
        "items": items,
        "totals": totals,
        "error": error,
        "payment_methods": list(PaymentMethod),
        "cart_count": sum(it.quantity for it in items),
    })


# ==========================================
# ✅ Checkout - Confirm Order
# ==========================================

@router.post("/checkout")
async def checkout(
    request: Request,
    delivery_address: str = Form(""),
    payment_method: str = Form(""),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    csrf_check(request, csrf_token)

    try:
        order = order_service.checkout(db, me, delivery_address, payment_method)
        db.commit()
    except InvalidCartDataError as e:
        db.commit()
        flash_error(request, e.message)
        return RedirectResponse("/checkout", status_code=303)
    except StorefrontError as e:
        db.rollback()
        flash_error(request, e.message)
        return RedirectResponse("/checkout", status_code=303)

    flash(request, f"Order #{order.id} confirmed! Thank you.")
    return RedirectResponse("/profile", status_code=303)
