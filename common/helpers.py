"""
Storefront - Shared Helpers
=============================
Pure utility functions with NO database or module dependencies.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from numbers import Real
from typing import Optional

CENT = Decimal("0.01")


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_int(value) -> Optional[int]:
    """Safely convert a string/number to int. Returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def safe_decimal(value) -> Optional[Decimal]:
    """Safely convert a string/number to Decimal. Returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    return d if d.is_finite() else None


def is_number(value) -> bool:
    """True for real numbers (int, float, Decimal), False for bool/None/strings."""
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, Real):
        return value == value and value not in (float("inf"), float("-inf"))
    return False


def quantize_money(value) -> Decimal:
    """Round a monetary amount to two decimal places."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value, symbol: str = "£") -> str:
    """Format an amount as a currency string: 12.5 -> '£12.50'."""
    if value is None:
        value = 0
    try:
        return f"{symbol}{quantize_money(value):,.2f}"
    except (InvalidOperation, ValueError, TypeError):
        return str(value)


def safe_next_url(url: str) -> str:
    """Only allow relative paths as redirect targets (prevent open redirect)."""
    if not url or not url.startswith("/") or url.startswith("//"):
        return "/"
    return url
