# storefront/model/product.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.api import money_str

class Product(db.Model):
    __tablename__ = "product"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default="")

    price = db.Column(db.Numeric(12, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    image_url = db.Column(db.String(1024))
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    category_id = db.Column(
        db.Integer,
        db.ForeignKey("category.id"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": money_str(self.price),
            "stock": self.stock,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "category": self.category.as_dict() if self.category else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
