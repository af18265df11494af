# storefront/cart/routes.py
from . import bp
from ..extensions import db
from ..services import cart_service
from ..utils.api import ok, money_str
from ..utils.request import json_body
from ..utils.decorators import current_user, login_required


def _cart_payload(user_id):
    lines = cart_service.get_cart_lines(db.session, user_id)
    return {
        "items": [it.as_api() for it in lines],
        "total": money_str(cart_service.cart_total(lines)),
    }


@bp.get("")
@login_required
def get_cart():
    return ok("cart", _cart_payload(current_user().id))


@bp.post("")
@login_required
def add_item():
    """
    Body: { "product_id": int, "quantity": int }
    Adding a product already in the cart increases its quantity.
    """
    data = json_body()
    user = current_user()
    item = cart_service.add_item(db.session, user.id, data.get("product_id"), data.get("quantity", 1))
    return ok("item added", {"item": item.as_api(), **_cart_payload(user.id)}, 201)


@bp.put("/<int:item_id>")
@login_required
def update_item(item_id: int):
    data = json_body()
    user = current_user()
    item = cart_service.update_item(db.session, user.id, item_id, data.get("quantity"))
    return ok("item updated", {"item": item.as_api(), **_cart_payload(user.id)})


@bp.delete("/<int:item_id>")
@login_required
def remove_item(item_id: int):
    user = current_user()
    cart_service.remove_item(db.session, user.id, item_id)
    return ok("Item removed from cart", _cart_payload(user.id))


@bp.delete("")
@login_required
def clear():
    user = current_user()
    cart_service.clear_cart(db.session, user.id)
    db.session.commit()
    return ok("Cart cleared successfully", _cart_payload(user.id))
