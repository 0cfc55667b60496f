"""
Profile Routes
================
Profile page: membership, loyalty points, and order history.
"""

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.templating import render_page
from modules.auth.deps import require_login
from modules.cart.service import cart_service
from modules.order.service import order_service

router = APIRouter(tags=["profile"])


# ==========================================
# 👤 Profile & Order History
# ==========================================

@router.get("/profile", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    orders = order_service.get_user_orders(db, me.username)

    return render_page(request, "shop/profile.html", {
        "user": me,
        "orders": orders,
        "cart_count": cart_service.get_count(db, me.id),
    })


@router.get("/api/orders")
async def api_orders(
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    orders = order_service.get_user_orders(db, me.username)
    return {
        "points": me.points,
        "orders": [
            {
                "id": o.id,
                "total": str(o.total),
                "shipping": str(o.shipping),
                "points_earned": o.points_earned,
                "delivery_address": o.delivery_address,
                "payment_method": o.payment_method,
                "items": [
                    {
                        "id": it.product_id,
                        "title": it.title,
                        "price": str(it.unit_price),
                        "quantity": it.quantity,
                    }
                    for it in o.items
                ],
            }
            for o in orders
        ],
    }
