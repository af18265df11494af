# storefront/services/cart_service.py
from sqlalchemy import delete, select
from sqlalchemy.orm import joinedload

from ..errors import InsufficientStockError, NotFoundError, ProductUnavailableError, ValidationError
from ..model import CartItem, Product
from ..utils.money import sum_lines


def get_cart_lines(session, user_id: int) -> list[CartItem]:
    stmt = (
        select(CartItem)
        .options(joinedload(CartItem.product))
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.id.asc())
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).unique().scalars().all()


def clear_cart(session, user_id: int) -> int:
    """Delete every line of the user's cart; no commit. Returns rows removed."""
    result = session.execute(
        delete(CartItem)
        .where(CartItem.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def cart_total(lines):
    return sum_lines((it.product.price, it.quantity) for it in lines if it.product)


def _validate_qty(quantity) -> int:
    # JSON ints or digit strings only; bool is an int subclass
    if isinstance(quantity, str) and quantity.strip().isdigit():
        quantity = int(quantity)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("quantity must be an integer >= 1", field="quantity")
    return quantity


def _check_stock(product: Product, qty: int):
    if product.stock < qty:
        raise InsufficientStockError(product.id, product.name, product.stock, qty)


def add_item(session, user_id: int, product_id, quantity=1) -> CartItem:
    """Add ``quantity`` units, merging with an existing line for the same product."""
    qty = _validate_qty(quantity)
    try:
        product_id = int(product_id)
    except (TypeError, ValueError):
        raise ValidationError("product_id is required", field="product_id")

    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise NotFoundError("Product not found")

    item = session.execute(
        select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
    ).scalar_one_or_none()

    new_qty = qty + (item.quantity if item else 0)
    _check_stock(product, new_qty)

    if item:
        item.quantity = new_qty
    else:
        item = CartItem(user_id=user_id, product_id=product_id, quantity=new_qty)
        session.add(item)
    session.commit()
    return item


def _own_item(session, user_id: int, item_id: int) -> CartItem:
    item = session.get(CartItem, item_id)
    if not item or item.user_id != user_id:
        raise NotFoundError("Cart item not found")
    return item


def update_item(session, user_id: int, item_id: int, quantity) -> CartItem:
    qty = _validate_qty(quantity)
    item = _own_item(session, user_id, item_id)
    if not item.product.is_active:
        raise ProductUnavailableError(item.product_id, item.product.name)
    _check_stock(item.product, qty)
    item.quantity = qty
    session.commit()
    return item


def remove_item(session, user_id: int, item_id: int):
    item = _own_item(session, user_id, item_id)
    session.delete(item)
    session.commit()
