"""
Auth Module - Routes
=====================
Sign-in, sign-up, logout.
"""

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import RedirectResponse, HTMLResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.templating import render_page
from common.security import csrf_check, get_cookie_kwargs, AUTH_COOKIE, CSRF_COOKIE
from common.exceptions import StorefrontError
from common.flash import flash
from common.helpers import safe_next_url
from modules.auth.service import auth_service
from modules.auth.deps import get_current_active_user

router = APIRouter(prefix="/auth", tags=["auth"])


# ==========================================
# 🔑 Sign In
# ==========================================

@router.get("/signin", response_class=HTMLResponse)
async def signin_page(
    request: Request,
    next: str = "",
    user=Depends(get_current_active_user),
):
    """Show sign-in page (redirect if already signed in)."""
    if user:
        return RedirectResponse(safe_next_url(next), status_code=302)

    return render_page(request, "auth/signin.html", {
        "error": None,
        "username": "",
        "next_url": next,
    })


@router.post("/signin")
async def signin(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    next_url: str = Form(""),
    csrf_token: str = Form(""),
    db: Session = Depends(get_db),
):
    csrf_check(request, csrf_token)

    try:
        user, token = auth_service.sign_in(db, username, password)
    except StorefrontError as e:
        return render_page(request, "auth/signin.html", {
            "error": e.message,
            "username": username.strip(),
            "next_url": next_url,
        })

    flash(request, f"Welcome back, {user.username}!")
    response = RedirectResponse(safe_next_url(next_url), status_code=303)
    response.set_cookie(AUTH_COOKIE, token, **get_cookie_kwargs())
    return response


# ==========================================
# 📝 Sign Up
# ==========================================

@router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request, user=Depends(get_current_active_user)):
    if user:
        return RedirectResponse("/", status_code=302)

    return render_page(request, "auth/signup.html", {"error": None, "username": ""})


@router.post("/signup")
async def signup(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    csrf_token: str = Form(""),
    db: Session = Depends(get_db),
):
    csrf_check(request, csrf_token)

    try:
        auth_service.sign_up(db, username, password)
        db.commit()
    except StorefrontError as e:
        db.rollback()
        return render_page(request, "auth/signup.html", {
            "error": e.message,
            "username": username.strip(),
        })

    flash(request, "Sign Up successful! You can now sign in.")
    return RedirectResponse("/auth/signin", status_code=303)


# ==========================================
# 🚪 Logout
# ==========================================

@router.get("/logout")
async def logout(request: Request):
    """Clear session cookie and redirect to sign-in."""
    response = RedirectResponse("/auth/signin", status_code=302)
    response.delete_cookie(AUTH_COOKIE)
    response.delete_cookie(CSRF_COOKIE)
    return response
