"""Shared fixtures: in-memory app, users, products, notifiers."""

from __future__ import annotations

from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from storefront import create_app
from storefront.config import TestingConfig
from storefront.extensions import db
from storefront.model import CartItem, Product, User
from storefront.services.notifier import Notifier

ADDRESS = "123 Main St, City, 00000"


class RecordingNotifier(Notifier):
    """Keeps every call instead of sending mail."""

    def __init__(self):
        self.created = []
        self.status_changes = []

    def notify_order_created(self, email, summary):
        self.created.append((email, summary))

    def notify_status_changed(self, email, summary):
        self.status_changes.append((email, summary))


class FailingNotifier(Notifier):
    """Simulates a mail provider outage."""

    def __init__(self):
        self.attempts = 0

    def notify_order_created(self, email, summary):
        self.attempts += 1
        raise ConnectionError("smtp server unreachable")

    def notify_status_changed(self, email, summary):
        self.attempts += 1
        raise ConnectionError("smtp server unreachable")


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def notifier(app) -> RecordingNotifier:
    rec = RecordingNotifier()
    app.extensions["notifier"] = rec
    return rec


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(email=None, role="user", password="secret123"):
        counter["n"] += 1
        u = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=generate_password_hash(password),
            first_name="Test",
            last_name=f"User{counter['n']}",
            role=role,
        )
        db.session.add(u)
        db.session.commit()
        return u

    return _make


@pytest.fixture
def user(make_user) -> User:
    return make_user(email="buyer@example.com")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(email="admin@example.com", role="admin")


@pytest.fixture
def make_product(app):
    def _make(name="Widget", price="10.00", stock=10, is_active=True, **kw):
        p = Product(name=name, description=f"{name} description", price=Decimal(price),
                    stock=stock, is_active=is_active, **kw)
        db.session.add(p)
        db.session.commit()
        return p

    return _make


@pytest.fixture
def add_to_cart(app):
    def _add(user, product, quantity):
        item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)
        db.session.add(item)
        db.session.commit()
        return item

    return _add


def auth_headers(user: User) -> dict:
    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}
