# storefront/model/settings.py
from sqlalchemy.sql import func

from ..extensions import db

class AppSettings(db.Model):
    """Single-row storefront settings shown by the frontend contact widget."""
    __tablename__ = "app_settings"

    id = db.Column(db.Integer, primary_key=True)
    admin_phone_number = db.Column(db.String(50), nullable=False)
    whatsapp_message = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    def as_dict(self):
        return {
            "admin_phone_number": self.admin_phone_number,
            "whatsapp_message": self.whatsapp_message,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
