# storefront/services/catalog.py
from sqlalchemy import or_, select, update

from ..errors import ValidationError
from ..model import Category, Product
from ..utils.money import parse_money
from ..utils.request import parse_bool


def find_products_by_ids(session, ids, *, lock=False) -> dict[int, Product]:
    """
    Fresh product rows keyed by id.

    ``lock=True`` reads with SELECT ... FOR UPDATE (ignored by SQLite) so the
    rows stay locked until the surrounding transaction ends.
    """
    ids = sorted(set(ids))
    if not ids:
        return {}
    stmt = select(Product).where(Product.id.in_(ids)).order_by(Product.id)
    if lock:
        stmt = stmt.with_for_update()
    rows = session.execute(stmt.execution_options(populate_existing=True)).scalars().all()
    return {p.id: p for p in rows}


def decrement_stock(session, product_id: int, amount: int) -> bool:
    """
    Atomically take ``amount`` units. False when fewer are left.

    Single conditional UPDATE, so a concurrent decrement committed after our
    read can never push stock below zero. Loaded Product objects are not
    refreshed; callers expire them.
    """
    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= amount)
        .values(stock=Product.stock - amount)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def current_stock(session, product_id: int) -> int:
    return session.execute(select(Product.stock).where(Product.id == product_id)).scalar_one_or_none() or 0


# ---- listing / admin payloads ------------------------------------------------

def product_query(*, search=None, category=None, include_inactive=False):
    q = Product.query
    if not include_inactive:
        q = q.filter(Product.is_active.is_(True))
    if category:
        category = str(category).strip()
        if category.isdigit():
            q = q.filter(Product.category_id == int(category))
        else:
            q = q.join(Category).filter(Category.name.ilike(category))
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
    return q.order_by(Product.created_at.desc(), Product.id.desc())


def _text(data, field, max_len):
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ""
    if not value or len(value) > max_len:
        raise ValidationError(f"{field} is required (max {max_len} chars)", field=field)
    return value


def parse_product_payload(session, data: dict, *, partial=False) -> dict:
    """
    Validate an admin create/update body; ``partial`` skips missing fields.
    Returns only the fields to write.
    """
    out = {}

    def present(field):
        return field in data or not partial

    if present("name"):
        out["name"] = _text(data, "name", 255)
    if present("description"):
        out["description"] = _text(data, "description", 10_000)

    if present("price"):
        price = parse_money(data.get("price"))
        if price is None or price <= 0:
            raise ValidationError("price must be a positive number", field="price")
        out["price"] = price

    if present("stock"):
        stock = data.get("stock")
        if isinstance(stock, str) and stock.strip().isdigit():
            stock = int(stock)
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise ValidationError("stock must be an integer >= 0", field="stock")
        out["stock"] = stock

    if "category_id" in data:
        cid = data.get("category_id")
        if cid in (None, ""):
            out["category_id"] = None
        else:
            try:
                cid = int(cid)
            except (TypeError, ValueError):
                raise ValidationError("category_id must be an integer", field="category_id")
            if not session.get(Category, cid):
                raise ValidationError("category not found", field="category_id")
            out["category_id"] = cid

    if "image_url" in data:
        out["image_url"] = (data.get("image_url") or "").strip() or None

    if "is_active" in data:
        out["is_active"] = parse_bool(data.get("is_active"), "is_active")

    return out
