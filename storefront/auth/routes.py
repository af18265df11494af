import re

from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from . import bp
from ..model import User
from ..extensions import db
from ..errors import ConflictError, ValidationError
from ..utils.api import ok, err
from ..utils.request import json_body
from ..utils.decorators import current_user, login_required

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _issue_token(user: User) -> str:
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role})


def _name(data, field, required, min_len=1):
    if field not in data and not required:
        return None
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ""
    if not min_len <= len(value) <= 120:
        raise ValidationError(f"{field} must be {min_len}-120 characters", field=field)
    return value


@bp.post("/register")
def register():
    data = json_body()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required", field="email")
    if len(password) < 6:
        raise ValidationError("Password required, min 6 chars", field="password")
    first_name = _name(data, "first_name", True)
    last_name = _name(data, "last_name", True)

    if User.query.filter_by(email=email).first():
        raise ConflictError("Email already registered", field="email")

    # Bootstrap: very first account becomes admin
    is_first_user = db.session.query(User.id).count() == 0
    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        role="admin" if is_first_user else "user",
    )
    db.session.add(user)
    db.session.commit()

    return ok("Account created successfully",
              {"user": user.as_dict(), "token": _issue_token(user)}, 201)


@bp.post("/login")
def login():
    data = json_body()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password_hash, password):
        return err("Invalid email or password", 401)

    return ok("You've logged in successfully",
              {"user": user.as_dict(), "token": _issue_token(user)})


@bp.get("/me")
@login_required
def me():
    return ok("profile", {"user": current_user().as_dict()})


@bp.put("/me")
@login_required
def update_me():
    data = json_body()
    user = current_user()
    first_name = _name(data, "first_name", False, min_len=2)
    last_name = _name(data, "last_name", False, min_len=2)
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    if "phone_number" in data:
        phone = (data.get("phone_number") or "").strip()
        if len(phone) > 50:
            raise ValidationError("phone_number is too long", field="phone_number")
        user.phone_number = phone or None
    db.session.commit()
    return ok("Profile updated", {"user": user.as_dict()})
