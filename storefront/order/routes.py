# storefront/order/routes.py
from flask import current_app, request

from . import bp
from ..extensions import db
from ..services import order_service
from ..services.notifier import get_notifier
from ..utils.api import ok, paginate
from ..utils.decorators import current_user, login_required


# ---- public ------------------------------------------------------------------

@bp.get("/track/<code>")
def track_public(code):
    order = order_service.find_by_tracking_code(db.session, code)
    return ok("order", {"order": order_service.public_tracking_view(order)})


# ---- authenticated -----------------------------------------------------------

@bp.post("")
@login_required
def place_order():
    """
    Body: { "shipping_address": str }   (min MIN_ADDRESS_LENGTH chars)
    Turns the caller's cart into an order.
    """
    cfg = current_app.config
    payload = order_service.validate_place_order(
        request.get_json(silent=True), cfg["MIN_ADDRESS_LENGTH"]
    )
    order = order_service.place_order(
        db.session,
        current_user(),
        payload.shipping_address,
        get_notifier(),
        min_address_length=cfg["MIN_ADDRESS_LENGTH"],
        notify_async=cfg["NOTIFY_ASYNC"],
    )
    resp = ok("Order created successfully",
              {"order": order.as_api(), "tracking_code": order.tracking_code}, 201)
    resp.headers["X-Order-Id"] = str(order.id)
    return resp


@bp.get("")
@login_required
def list_orders():
    """Query params: page, limit (cap 100)."""
    page = paginate(order_service.user_orders_query(current_user().id),
                    request.args.get("page"), request.args.get("limit"))
    return ok("orders", {
        "orders": [o.as_api() for o in page["items"]],
        "pagination": page["pagination"],
    })


@bp.get("/<int:order_id>")
@login_required
def get_order(order_id: int):
    order = order_service.get_user_order(db.session, current_user().id, order_id)
    return ok("order", {"order": order.as_api()})


@bp.get("/my/<code>")
@login_required
def track_mine(code):
    order = order_service.find_by_tracking_code(db.session, code)
    order = order_service.get_user_order(db.session, current_user().id, order.id)
    return ok("order", {"order": order.as_api()})
