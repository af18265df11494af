# storefront/model/cart.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.api import money_str
from ..utils.money import line_total

class CartItem(db.Model):
    """One pending (user, product, quantity) line; a user's cart is the set of their lines."""
    __tablename__ = "cart_item"
    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_cart_item_user_product"),
        db.CheckConstraint("quantity > 0", name="ck_cart_item_quantity_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    product = db.relationship("Product", lazy="joined")

    def as_api(self):
        p = self.product
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "line_total": money_str(line_total(p.price, self.quantity)) if p else None,
            "product": {
                "id": p.id,
                "name": p.name,
                "price": money_str(p.price),
                "image_url": p.image_url,
                "stock": p.stock,
                "is_active": p.is_active,
            } if p else None,
        }
