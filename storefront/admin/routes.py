# storefront/admin/routes.py
"""Admin-only surface: dashboard, catalog management, orders, users."""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta, timezone

from flask import current_app, request
from sqlalchemy import func

from . import bp
from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..model import CartItem, Order, OrderItem, OrderStatus, Product, User
from ..services import order_service
from ..services.catalog import parse_product_payload, product_query
from ..services.notifier import get_notifier
from ..utils.api import ok, err, money_str, paginate
from ..utils.request import json_body
from ..utils.decorators import current_user, role_required
from ..utils.money import round_money

logger = logging.getLogger(__name__)

admin_only = role_required("admin", message="Access denied. Admin role required.")


def _months_back(now, n):
    """First day of the month ``n`` months before ``now``."""
    month_index = now.year * 12 + (now.month - 1) - n
    return datetime(month_index // 12, month_index % 12 + 1, 1)


# ---- dashboard ---------------------------------------------------------------

@bp.get("/dashboard")
@admin_only
def dashboard():
    threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    not_cancelled = Order.status != OrderStatus.CANCELLED.value

    total_products = Product.query.filter(Product.is_active.is_(True)).count()
    total_orders = Order.query.count()
    revenue = db.session.query(func.coalesce(func.sum(Order.total), 0)).filter(not_cancelled).scalar()
    pending_orders = Order.query.filter(Order.status == OrderStatus.PENDING.value).count()
    low_stock = Product.query.filter(Product.is_active.is_(True), Product.stock <= threshold).count()

    recent = Order.query.order_by(Order.created_at.desc(), Order.id.desc()).limit(5).all()

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    since = _months_back(now, 5)
    sales = OrderedDict()
    for i in range(5, -1, -1):
        m = _months_back(now, i)
        sales[m.strftime("%Y-%m")] = {"total": round_money(0), "count": 0}
    for created_at, total in (db.session.query(Order.created_at, Order.total)
                              .filter(not_cancelled, Order.created_at >= since)):
        bucket = sales.get(created_at.strftime("%Y-%m"))
        if bucket is not None:
            bucket["total"] = round_money(bucket["total"] + total)
            bucket["count"] += 1

    return ok("dashboard", {
        "total_products": total_products,
        "total_orders": total_orders,
        "total_revenue": money_str(round_money(revenue)),
        "pending_orders": pending_orders,
        "low_stock_products": low_stock,
        "recent_orders": [o.as_admin_api() for o in recent],
        "sales_by_month": [
            {"month": k, "total": money_str(v["total"]), "count": v["count"]}
            for k, v in sales.items()
        ],
    })


# ---- products ----------------------------------------------------------------

@bp.get("/products")
@admin_only
def list_products():
    q = product_query(
        search=request.args.get("search"),
        category=request.args.get("category"),
        include_inactive=True,
    )
    page = paginate(q, request.args.get("page"), request.args.get("limit"))
    return ok("products", {
        "products": [p.as_api() for p in page["items"]],
        "pagination": page["pagination"],
    })


@bp.post("/products")
@admin_only
def create_product():
    fields = parse_product_payload(db.session, json_body())
    p = Product(**fields)
    db.session.add(p)
    db.session.commit()
    logger.info("product %s created by admin %s", p.id, current_user().id)
    return ok("Product created", {"product": p.as_api()}, 201)


@bp.put("/products/<int:product_id>")
@admin_only
def update_product(product_id: int):
    p = db.session.get(Product, product_id)
    if not p:
        raise NotFoundError("Product not found")
    fields = parse_product_payload(db.session, json_body(), partial=True)
    for k, v in fields.items():
        setattr(p, k, v)
    db.session.commit()
    return ok("Product updated", {"product": p.as_api()})


@bp.delete("/products/<int:product_id>")
@admin_only
def delete_product(product_id: int):
    """
    Products referenced by an order are only deactivated so order
    history keeps its product rows; others are removed with their cart lines.
    """
    p = db.session.get(Product, product_id)
    if not p:
        raise NotFoundError("Product not found")
    if OrderItem.query.filter_by(product_id=p.id).first():
        p.is_active = False
        db.session.commit()
        return ok("Product deactivated (it appears in existing orders)", {"product": p.as_api()})
    CartItem.query.filter_by(product_id=p.id).delete(synchronize_session=False)
    db.session.delete(p)
    db.session.commit()
    return ok("Product deleted successfully")


# ---- orders ------------------------------------------------------------------

@bp.get("/orders")
@admin_only
def list_orders():
    """Query params: status, page, limit."""
    q = Order.query
    status = request.args.get("status")
    if status:
        q = q.filter(Order.status == order_service.parse_status(status).value)
    q = q.order_by(Order.created_at.desc(), Order.id.desc())
    page = paginate(q, request.args.get("page"), request.args.get("limit"))
    return ok("orders", {
        "orders": [o.as_admin_api() for o in page["items"]],
        "pagination": page["pagination"],
    })


@bp.put("/orders/<int:order_id>/status")
@admin_only
def update_order_status(order_id: int):
    data = json_body()
    if not data.get("status"):
        raise ValidationError("status is required", field="status")
    order = order_service.update_status(
        db.session,
        order_id,
        data["status"],
        get_notifier(),
        notify_async=current_app.config["NOTIFY_ASYNC"],
    )
    return ok("Order status updated", {"order": order.as_admin_api()})


# ---- users -------------------------------------------------------------------

def _admin_count():
    return User.query.filter_by(role="admin").count()


@bp.get("/users")
@admin_only
def list_users():
    q = User.query.order_by(User.id.asc())
    page = paginate(q, request.args.get("page"), request.args.get("limit"))
    return ok("users", {
        "users": [u.as_dict() for u in page["items"]],
        "pagination": page["pagination"],
    })


@bp.put("/users/<int:user_id>/role")
@admin_only
def update_user_role(user_id: int):
    body = json_body()
    new_role = (body.get("role") or "").strip().lower()
    if new_role not in {"user", "admin"}:
        raise ValidationError("Invalid role", field="role")

    target = db.session.get(User, user_id)
    if not target:
        raise NotFoundError("User not found")

    # Prevent demoting the LAST admin
    if target.role == "admin" and new_role != "admin" and _admin_count() <= 1:
        return err("Cannot demote the last admin", 400)

    target.role = new_role
    db.session.commit()
    return ok("Role updated", {"user": target.as_dict()})


@bp.delete("/users/<int:user_id>")
@admin_only
def delete_user(user_id: int):
    target = db.session.get(User, user_id)
    if not target:
        raise NotFoundError("User not found")
    if target.role == "admin" and _admin_count() <= 1:
        return err("Cannot delete the last admin", 400)
    if Order.query.filter_by(user_id=target.id).first():
        return err("Cannot delete a user with orders", 409)

    db.session.delete(target)
    db.session.commit()
    return ok("User deleted")
