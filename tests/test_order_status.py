"""Order status machine and status notifications."""

from __future__ import annotations

import pytest

from storefront.errors import InvalidStatusTransitionError, NotFoundError, ValidationError
from storefront.extensions import db
from storefront.model import OrderStatus
from storefront.services.order_service import can_transition, place_order, update_status

from .conftest import ADDRESS, FailingNotifier

S = OrderStatus


@pytest.fixture
def order(app, user, make_product, add_to_cart):
    p = make_product(stock=5)
    add_to_cart(user, p, 1)
    return place_order(db.session, user, ADDRESS)


@pytest.mark.parametrize("current,new", [
    (S.PENDING, S.CONFIRMED),
    (S.CONFIRMED, S.PROCESSING),
    (S.PROCESSING, S.SHIPPED),
    (S.SHIPPED, S.DELIVERED),
    (S.PENDING, S.CANCELLED),
    (S.SHIPPED, S.CANCELLED),
])
def test_allowed_transitions(current, new):
    assert can_transition(current, new)


@pytest.mark.parametrize("current,new", [
    (S.PENDING, S.SHIPPED),
    (S.CONFIRMED, S.PENDING),
    (S.PENDING, S.PENDING),
    (S.DELIVERED, S.CANCELLED),
    (S.CANCELLED, S.PENDING),
    (S.DELIVERED, S.SHIPPED),
])
def test_rejected_transitions(current, new):
    assert not can_transition(current, new)


def test_walks_full_lifecycle(order, notifier):
    for status in ("CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED"):
        updated = update_status(db.session, order.id, status, notifier)
        assert updated.status == status

    assert [s["status"] for _, s in notifier.status_changes] == [
        "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED",
    ]


def test_skipping_a_step_is_rejected(order, notifier):
    with pytest.raises(InvalidStatusTransitionError) as exc:
        update_status(db.session, order.id, "SHIPPED", notifier)
    assert exc.value.payload == {"current": "PENDING", "requested": "SHIPPED"}
    assert db.session.get(type(order), order.id).status == "PENDING"
    assert notifier.status_changes == []


def test_terminal_states_are_final(order):
    update_status(db.session, order.id, "cancelled")
    with pytest.raises(InvalidStatusTransitionError):
        update_status(db.session, order.id, "CONFIRMED")


def test_unknown_status(order):
    with pytest.raises(ValidationError):
        update_status(db.session, order.id, "LOST")


def test_unknown_order(app):
    with pytest.raises(NotFoundError):
        update_status(db.session, 999, "CONFIRMED")


def test_status_survives_notifier_outage(order):
    failing = FailingNotifier()
    updated = update_status(db.session, order.id, "CONFIRMED", failing)
    assert failing.attempts == 1
    assert updated.status == "CONFIRMED"
