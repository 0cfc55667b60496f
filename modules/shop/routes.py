"""
Shop Module - Routes
======================
Storefront product listing, fetched from the external catalog API.
"""

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.templating import render_page
from common.exceptions import CatalogFetchError
from modules.auth.deps import require_login
from modules.cart.service import cart_service
from modules.catalog.service import CatalogClient, get_catalog_client

router = APIRouter(tags=["shop"])


@router.get("/", response_class=HTMLResponse)
async def home_page(
    request: Request,
    db: Session = Depends(get_db),
    me=Depends(require_login),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Shop home page - list all products from the catalog API."""
    products, error = [], None
    try:
        products = await catalog.fetch_products()
    except CatalogFetchError as e:
        error = e.message

    return render_page(request, "shop/home.html", {
        "user": me,
        "products": products,
        "error": error,
        "cart_count": cart_service.get_count(db, me.id),
    })


@router.get("/api/products")
async def api_products(catalog: CatalogClient = Depends(get_catalog_client)):
    """JSON passthrough of the normalized catalog."""
    try:
        products = await catalog.fetch_products()
    except CatalogFetchError as e:
        return JSONResponse({"detail": e.message}, status_code=502)
    return {"products": [p.to_dict() for p in products]}
