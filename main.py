"""
Storefront - Application Entry Point
======================================
FastAPI app initialization, middleware, and router registration.
"""

import logging
import urllib.parse
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from config.database import Base, engine

logger = logging.getLogger("storefront")


# ==========================================
# Import ALL models so Base can see them
# ==========================================
from modules.user.models import User  # noqa: F401
from modules.system.models import SystemSetting  # noqa: F401
from modules.cart.models import CartItem  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401

# ==========================================
# Import routers
# ==========================================
from modules.auth.routes import router as auth_router
from modules.shop.routes import router as shop_router
from modules.cart.routes import router as cart_router
from modules.customer.routes import router as profile_router


# ==========================================
# Exception handler: 401 → redirect to sign-in
# ==========================================

async def auth_exception_handler(request: Request, exc: StarletteHTTPException):
    """Redirect 401 to sign-in for browser requests; JSON for everything else."""
    is_html = "text/html" in request.headers.get("accept", "")
    if exc.status_code == 401 and is_html:
        if request.method == "POST":
            # For form submissions, return to the page the form was on
            parsed = urllib.parse.urlparse(request.headers.get("referer", "/"))
            next_url = parsed.path or "/"
            if parsed.query:
                next_url += "?" + parsed.query
        else:
            next_url = str(request.url.path)
            if request.url.query:
                next_url += "?" + str(request.url.query)
        return RedirectResponse(
            f"/auth/signin?next={urllib.parse.quote(next_url, safe='')}", status_code=302,
        )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
    yield


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="Storefront",
    description="Mock e-commerce storefront",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

app.add_exception_handler(StarletteHTTPException, auth_exception_handler)


# ==========================================
# Middleware: Flash Messages
# ==========================================
@app.middleware("http")
async def flash_message_middleware(request: Request, call_next):
    """Transfer flash messages from request.state to response cookie."""
    from common.flash import set_flash_cookie, clear_flash_cookie, FLASH_COOKIE
    response = await call_next(request)
    # If route set flash messages, write them to cookie
    if getattr(request.state, "_flash_messages", None):
        set_flash_cookie(response, request.state._flash_messages)
    elif request.method == "GET" and request.cookies.get(FLASH_COOKIE):
        # Flash messages were displayed on this GET, clear the cookie
        clear_flash_cookie(response)
    return response


# ==========================================
# Register Routers
# ==========================================
app.include_router(auth_router)
app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(profile_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
