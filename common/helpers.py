"""
DineFlow - Shared Helpers
==========================
Pure utility functions with NO database or module dependencies.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_int(value: Optional[str]) -> Optional[int]:
    """Safely convert a string to int. Returns None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def to_decimal(value) -> Decimal:
    """Convert a number/str to Decimal without going through binary float."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    """Round a monetary amount to cents (half-up). Use only at output boundaries."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def clamp_page(page: Optional[int], limit: Optional[int], default_limit: int, max_limit: int):
    """Normalize pagination input: page >= 1, 1 <= limit <= max_limit."""
    page = max(1, page or 1)
    limit = min(max_limit, max(1, limit or default_limit))
    return page, limit


def pagination_meta(page: int, limit: int, total: int) -> dict:
    """Pagination block returned alongside paged order lists."""
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_orders": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }
