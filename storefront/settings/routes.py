# storefront/settings/routes.py
from flask import current_app

from . import bp
from ..extensions import db
from ..errors import ValidationError
from ..model import AppSettings
from ..utils.api import ok
from ..utils.request import json_body
from ..utils.decorators import role_required


def _load_settings(create=True):
    s = AppSettings.query.order_by(AppSettings.id.asc()).first()
    if s is None and create:
        cfg = current_app.config
        s = AppSettings(
            admin_phone_number=cfg["DEFAULT_ADMIN_PHONE"],
            whatsapp_message=cfg["DEFAULT_WHATSAPP_MESSAGE"],
        )
        db.session.add(s)
        db.session.commit()
    return s


def _field(data, name, legacy):
    return data.get(name, data.get(legacy))


@bp.get("")
def get_settings():
    """Public; the first read stores the configured defaults."""
    return ok("settings", {"settings": _load_settings().as_dict()})


@bp.put("")
@role_required("admin")
def update_settings():
    """
    Body: { "admin_phone_number": str, "whatsapp_message": str | null }
    camelCase keys (adminPhoneNumber, whatsappMessage) are accepted too.
    """
    data = json_body()
    phone = _field(data, "admin_phone_number", "adminPhoneNumber")
    phone = phone.strip() if isinstance(phone, str) else ""
    if not phone or len(phone) > 50:
        raise ValidationError("admin_phone_number is required (max 50 chars)", field="admin_phone_number")

    message = _field(data, "whatsapp_message", "whatsappMessage")
    if message is not None and not isinstance(message, str):
        raise ValidationError("whatsapp_message must be a string", field="whatsapp_message")
    message = (message or "").strip() or None
    if message and len(message) > 500:
        raise ValidationError("whatsapp_message is too long (max 500 chars)", field="whatsapp_message")

    s = _load_settings(create=False)
    if s is None:
        s = AppSettings(admin_phone_number=phone, whatsapp_message=message)
        db.session.add(s)
    else:
        s.admin_phone_number = phone
        s.whatsapp_message = message
    db.session.commit()
    return ok("Settings updated", {"settings": s.as_dict()})
