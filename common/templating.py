"""
Storefront - Template Configuration
=====================================
Jinja2 templates setup with custom filters and global functions.
"""

from fastapi.templating import Jinja2Templates

from config.settings import TEMPLATE_DIR, CURRENCY_SYMBOL
from common.helpers import format_money
from common.flash import get_flashed_messages

# Initialize templates
templates = Jinja2Templates(directory=TEMPLATE_DIR)


# ==========================================
# Register Filters & Globals
# ==========================================

# Filters (usage in template: {{ value | money }})
templates.env.filters["money"] = lambda v: format_money(v, CURRENCY_SYMBOL)
templates.env.filters["title_case"] = lambda v: str(v).replace("_", " ").title() if v else ""

# Flash messages: available in templates via get_flashed_messages(request)
templates.env.globals["get_flashed_messages"] = get_flashed_messages


# ==========================================
# Page Rendering
# ==========================================

def render_page(request, template: str, context: dict = None, status_code: int = 200):
    """Render a template with a fresh CSRF token (also set as cookie)."""
    from common.security import new_csrf_token, CSRF_COOKIE

    csrf = new_csrf_token()
    ctx = {"csrf_token": csrf}
    ctx.update(context or {})
    response = templates.TemplateResponse(request, template, ctx, status_code=status_code)
    response.set_cookie(CSRF_COOKIE, csrf, httponly=True, samesite="lax")
    return response
