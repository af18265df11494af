# --- storefront/model/user.py ---
from sqlalchemy.sql import func

from ..extensions import db

class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False, default="")
    first_name = db.Column(db.String(120), nullable=False, default="")
    last_name = db.Column(db.String(120), nullable=False, default="")
    phone_number = db.Column(db.String(50))
    role = db.Column(db.String(20), nullable=False, default="user", index=True)  # user | admin
    created_at = db.Column(db.DateTime, server_default=func.now())

    cart_items = db.relationship("CartItem", backref="user", cascade="all, delete-orphan", lazy=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def as_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
