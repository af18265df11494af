from flask import request

from . import bp
from ..extensions import db
from ..model import Product
from ..errors import NotFoundError
from ..services.catalog import product_query
from ..utils.api import ok, paginate


@bp.get("")
def list_products():
    """
    Query params:
      - search   -> substring on name/description
      - category -> category id or name
      - page, limit (cap 100)
    """
    q = product_query(
        search=request.args.get("search"),
        category=request.args.get("category"),
    )
    page = paginate(q, request.args.get("page"), request.args.get("limit"))
    return ok("products", {
        "products": [p.as_api() for p in page["items"]],
        "pagination": page["pagination"],
    })


@bp.get("/<int:product_id>")
def get_product(product_id: int):
    p = db.session.get(Product, product_id)
    if not p or not p.is_active:
        raise NotFoundError("Product not found")
    return ok("product", {"product": p.as_api()})
