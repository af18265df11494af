from flask import request
from sqlalchemy import func, or_

from . import bp
from ..model import Category, Product
from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..utils.api import ok, paginate
from ..utils.request import json_body, parse_bool
from ..utils.decorators import role_required

# ------------------------ helpers ------------------------
def _active_counts():
    rows = (
        db.session.query(Product.category_id, func.count(Product.id))
        .filter(Product.is_active.is_(True), Product.category_id.isnot(None))
        .group_by(Product.category_id)
        .all()
    )
    return dict(rows)

def _get_active(cid) -> Category:
    c = db.session.get(Category, cid)
    if not c or not c.is_active:
        raise NotFoundError("Category not found")
    return c

def _clean_name(data):
    name = data.get("name")
    name = name.strip() if isinstance(name, str) else ""
    if not name or len(name) > 100:
        raise ValidationError("name required (max 100 chars)", field="name")
    return name

# ------------------------ PUBLIC ------------------------

@bp.get("")
def list_categories():
    counts = _active_counts()
    cats = Category.query.filter(Category.is_active.is_(True)).order_by(Category.name.asc()).all()
    return ok("categories", {
        "categories": [c.as_dict(product_count=counts.get(c.id, 0)) for c in cats],
    })


@bp.get("/<int:cid>")
def get_category(cid):
    c = _get_active(cid)
    products = (Product.query
                .filter(Product.category_id == c.id, Product.is_active.is_(True))
                .order_by(Product.name.asc())
                .all())
    data = c.as_dict(product_count=len(products))
    data["products"] = [
        {"id": p.id, "name": p.name, "price": p.as_api()["price"], "image_url": p.image_url}
        for p in products
    ]
    return ok("category", {"category": data})

# ------------------------ ADMIN ------------------------

@bp.get("/admin/all")
@role_required("admin")
def list_all_categories():
    """
    Every category, inactive ones included.
    Query params: search (name/description), page, limit.
    """
    q = Category.query
    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Category.name.ilike(like), Category.description.ilike(like)))
    page = paginate(q.order_by(Category.id.desc()), request.args.get("page"), request.args.get("limit"))
    counts = _active_counts()
    return ok("categories", {
        "categories": [c.as_dict(product_count=counts.get(c.id, 0)) for c in page["items"]],
        "pagination": page["pagination"],
    })


@bp.post("")
@role_required("admin")
def create_category():
    data = json_body()
    name = _clean_name(data)
    if Category.query.filter(Category.name.ilike(name)).first():
        raise ConflictError("category name already exists")
    c = Category(
        name=name,
        description=(data.get("description") or "").strip() or None,
        icon_name=(data.get("icon_name") or "").strip() or None,
    )
    db.session.add(c)
    db.session.commit()
    return ok("Category created", {"category": c.as_dict()}, 201)


@bp.put("/<int:cid>")
@role_required("admin")
def update_category(cid):
    c = db.session.get(Category, cid)
    if not c:
        raise NotFoundError("Category not found")
    data = json_body()
    if "name" in data:
        new_name = _clean_name(data)
        exists = Category.query.filter(
            Category.name.ilike(new_name), Category.id != c.id
        ).first()
        if exists:
            raise ConflictError("category name already exists")
        c.name = new_name
    if "description" in data:
        c.description = (data.get("description") or "").strip() or None
    if "icon_name" in data:
        c.icon_name = (data.get("icon_name") or "").strip() or None
    if "is_active" in data:
        c.is_active = parse_bool(data.get("is_active"), "is_active")
    db.session.commit()
    return ok("Category updated", {"category": c.as_dict()})


@bp.delete("/<int:cid>")
@role_required("admin")
def delete_category(cid):
    """Soft delete; refused while the category still holds active products."""
    c = db.session.get(Category, cid)
    if not c:
        raise NotFoundError("Category not found")
    has_active = Product.query.filter(
        Product.category_id == cid, Product.is_active.is_(True)
    ).first()
    if has_active:
        raise ConflictError("cannot delete: category has active products")
    c.is_active = False
    db.session.commit()
    return ok("Category deleted", {"category": c.as_dict()})
