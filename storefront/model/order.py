# storefront/model/order.py
import enum
from datetime import datetime, timezone

from ..extensions import db
from ..utils.api import money_str


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self):
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    tracking_code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)

    # customer snapshot
    customer_email = db.Column(db.String(255), nullable=False)
    shipping_address = db.Column(db.String(500), nullable=False)

    total = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime, default=_utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User", lazy="joined")
    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id.asc()",
    )

    def as_api(self):
        return {
            "id": self.id,
            "tracking_code": self.tracking_code,
            "status": self.status,
            "customer_email": self.customer_email,
            "shipping_address": self.shipping_address,
            "total": money_str(self.total),
            "items": [i.as_api() for i in self.items],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def as_admin_api(self):
        d = self.as_api()
        d["user"] = {
            "id": self.user.id,
            "email": self.user.email,
            "first_name": self.user.first_name,
            "last_name": self.user.last_name,
        } if self.user else None
        return d


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False, index=True)

    # snapshot at order time; never updated afterwards
    product_name = db.Column(db.String(255), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product", lazy="joined")

    def as_api(self):
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "image_url": self.product.image_url if self.product else None,
            "unit_price": money_str(self.unit_price),
            "quantity": self.quantity,
        }
