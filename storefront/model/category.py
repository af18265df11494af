# --- storefront/model/category.py ---
from ..extensions import db

class Category(db.Model):
    __tablename__ = "category"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.Text)
    icon_name = db.Column(db.String(64))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    products = db.relationship(
        "Product",
        backref="category",
        lazy=True
        )

    def as_dict(self, product_count=None):
        d = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon_name": self.icon_name,
            "is_active": self.is_active,
            }
        if product_count is not None:
            d["product_count"] = product_count
        return d
