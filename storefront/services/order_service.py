# storefront/services/order_service.py
"""
Order placement and order lifecycle.

``place_order`` turns a user's cart into an Order in one transaction:
validate against freshly read stock, insert Order + OrderItems, decrement
stock with a conditional UPDATE, clear the cart, commit. Nothing partial is
ever committed. The confirmation email is attempted only after commit and
can never undo the order.

Every function takes the SQLAlchemy session explicitly; routes pass
``db.session``.
"""
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select

from ..errors import (
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    ProductUnavailableError,
    ValidationError,
)
from ..model import Order, OrderItem, OrderStatus
from ..utils.api import money_str
from ..utils.money import line_total, sum_lines
from .cart_service import clear_cart, get_cart_lines
from .catalog import current_stock, decrement_stock, find_products_by_ids
from .notifier import notify_safely

logger = logging.getLogger(__name__)

MAX_ADDRESS_LENGTH = 500
TRACKING_CODE_LENGTH = 10
TRACKING_CODE_ATTEMPTS = 5

# single forward step, or cancel from any non-terminal state
_NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}


# ---- input validation --------------------------------------------------------

@dataclass(frozen=True)
class PlaceOrderInput:
    shipping_address: str


def validate_shipping_address(value, min_length=10) -> str:
    if not isinstance(value, str):
        raise ValidationError("shipping address is required", field="shipping_address")
    address = " ".join(value.split())
    if len(address) < min_length:
        raise ValidationError(
            f"shipping address must be at least {min_length} characters",
            field="shipping_address",
        )
    if len(address) > MAX_ADDRESS_LENGTH:
        raise ValidationError(
            f"shipping address must be at most {MAX_ADDRESS_LENGTH} characters",
            field="shipping_address",
        )
    return address


def validate_place_order(raw, min_address_length=10) -> PlaceOrderInput:
    """Raw JSON body -> PlaceOrderInput. Accepts ``shipping_address`` or ``shippingAddr``."""
    if not isinstance(raw, dict):
        raise ValidationError("request body must be a JSON object")
    value = raw.get("shipping_address", raw.get("shippingAddr"))
    return PlaceOrderInput(validate_shipping_address(value, min_address_length))


# ---- tracking codes ----------------------------------------------------------

def _random_code() -> str:
    return uuid.uuid4().hex[:TRACKING_CODE_LENGTH].upper()


def generate_tracking_code(session) -> str:
    """Short uppercase code from a random UUID, re-drawn while it is already taken."""
    for _ in range(TRACKING_CODE_ATTEMPTS):
        code = _random_code()
        taken = session.execute(
            select(Order.id).where(Order.tracking_code == code)
        ).first()
        if not taken:
            return code
        logger.info("tracking code collision on %s, drawing again", code)
    raise RuntimeError("could not allocate a unique tracking code")


# ---- order store -------------------------------------------------------------

def create_order(session, order: Order, lines: list[OrderItem]) -> Order:
    """Stage the order and its lines in the current transaction; no commit."""
    order.items = lines
    session.add(order)
    session.flush()
    return order


def order_summary(order: Order) -> dict:
    return {
        "id": order.id,
        "tracking_code": order.tracking_code,
        "status": order.status,
        "total": money_str(order.total),
        "customer_name": order.user.full_name if order.user else None,
        "items": [
            {
                "product_name": i.product_name,
                "quantity": i.quantity,
                "unit_price": money_str(i.unit_price),
                "line_total": money_str(line_total(i.unit_price, i.quantity)),
            }
            for i in order.items
        ],
    }


# ---- placement ---------------------------------------------------------------

def _check_lines(lines, products):
    for it in lines:
        p = products.get(it.product_id)
        if p is None or not p.is_active:
            raise ProductUnavailableError(it.product_id, p.name if p else None)
        if it.quantity > p.stock:
            raise InsufficientStockError(p.id, p.name, p.stock, it.quantity)


def place_order(session, user, shipping_address, notifier=None, *,
                min_address_length=10, notify_async=False) -> Order:
    address = validate_shipping_address(shipping_address, min_address_length)

    try:
        lines = get_cart_lines(session, user.id)
        if not lines:
            raise EmptyCartError()

        # fresh snapshot; stock may have moved since the items were added
        products = find_products_by_ids(session, [it.product_id for it in lines], lock=True)
        _check_lines(lines, products)

        total = sum_lines((products[it.product_id].price, it.quantity) for it in lines)

        order = Order(
            user_id=user.id,
            customer_email=user.email,
            shipping_address=address,
            total=total,
            status=OrderStatus.PENDING.value,
            tracking_code=generate_tracking_code(session),
        )
        order_lines = [
            OrderItem(
                product_id=it.product_id,
                product_name=products[it.product_id].name,
                unit_price=products[it.product_id].price,
                quantity=it.quantity,
            )
            for it in lines
        ]
        create_order(session, order, order_lines)

        for it in lines:
            if not decrement_stock(session, it.product_id, it.quantity):
                p = products[it.product_id]
                raise InsufficientStockError(p.id, p.name, current_stock(session, p.id), it.quantity)
        for p in products.values():
            session.expire(p, ["stock"])

        clear_cart(session, user.id)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("order %s placed by user %s (tracking %s, total %s)",
                order.id, user.id, order.tracking_code, order.total)

    if notifier is not None:
        notify_safely(notifier.notify_order_created, order.customer_email,
                      order_summary(order), run_async=notify_async)
    return order


# ---- lifecycle ---------------------------------------------------------------

def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"status must be one of: {allowed}", field="status")


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    if current.is_terminal:
        return False
    return new is OrderStatus.CANCELLED or _NEXT_STATUS.get(current) is new


def update_status(session, order_id: int, new_status, notifier=None, *, notify_async=False) -> Order:
    new = parse_status(new_status)
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")

    current = OrderStatus(order.status)
    if not can_transition(current, new):
        raise InvalidStatusTransitionError(current.value, new.value)

    order.status = new.value
    session.commit()
    logger.info("order %s status %s -> %s", order.id, current.value, new.value)

    if notifier is not None:
        notify_safely(notifier.notify_status_changed, order.customer_email,
                      order_summary(order), run_async=notify_async)
    return order


# ---- queries -----------------------------------------------------------------

def user_orders_query(user_id: int):
    return Order.query.filter(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())


def get_user_order(session, user_id: int, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order or order.user_id != user_id:
        raise NotFoundError("Order not found")
    return order


def find_by_tracking_code(session, code) -> Order:
    code = (code or "").strip().upper()
    order = session.execute(select(Order).where(Order.tracking_code == code)).scalar_one_or_none() if code else None
    if not order:
        raise NotFoundError("Order not found")
    return order


def public_tracking_view(order: Order) -> dict:
    """What anyone holding the tracking code may see: no address, email or ids."""
    return {
        "tracking_code": order.tracking_code,
        "status": order.status,
        "total": money_str(order.total),
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "items": [
            {
                "product_name": i.product_name,
                "image_url": i.product.image_url if i.product else None,
                "quantity": i.quantity,
                "unit_price": money_str(i.unit_price),
            }
            for i in order.items
        ],
    }
