# --- storefront/utils/api.py ---
from datetime import datetime, timezone
from decimal import Decimal

from flask import jsonify


def _api_time():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        },
    }


def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        },
    }


# ---- response shortcuts used by the blueprints ------------------------------
def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r

def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r


def money_str(value) -> str | None:
    """Decimal -> "12.34" for JSON; floats never leave the API."""
    if value is None:
        return None
    return str(value if isinstance(value, Decimal) else Decimal(str(value)))


def to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def paginate(query, page, per_page, max_per_page=100):
    page = max(to_int(page, 1), 1)
    per_page = min(max(to_int(per_page, 10), 1), max_per_page)
    items = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        "pagination": {
            "page": items.page,
            "pages": items.pages or 1,
            "limit": per_page,
            "total": items.total,
        },
        "items": items.items,
    }
