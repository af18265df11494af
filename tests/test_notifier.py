"""Email rendering and notifier selection."""

from __future__ import annotations

import logging

import pytest

from storefront.services import notifier as notifier_mod
from storefront.services.notifier import (
    LogNotifier,
    SmtpNotifier,
    build_notifier,
    notify_safely,
    render_order_created,
    render_status_changed,
)

SUMMARY = {
    "id": 42,
    "tracking_code": "AB12CD34EF",
    "status": "SHIPPED",
    "total": "64.97",
    "customer_name": "Ada <Lovelace>",
    "items": [
        {"product_name": "Mouse & Pad", "quantity": 3, "unit_price": "19.99", "line_total": "59.97"},
        {"product_name": "Mug", "quantity": 1, "unit_price": "5.00", "line_total": "5.00"},
    ],
}


def test_order_created_email():
    subject, html = render_order_created(SUMMARY, "https://shop.example")
    assert subject == "Order confirmation #00000042"
    assert "Mouse &amp; Pad" in html
    assert "$59.97" in html and "$64.97" in html
    assert "https://shop.example/track?code=AB12CD34EF" in html


def test_status_email_escapes_customer_name():
    subject, html = render_status_changed(SUMMARY, "")
    assert subject.startswith("Order shipped")
    assert "Ada &lt;Lovelace&gt;" in html


def test_pending_has_no_status_email():
    assert render_status_changed({**SUMMARY, "status": "PENDING"}, "") is None


def test_build_notifier_without_mail_server_only_logs():
    assert isinstance(build_notifier({"MAIL_SERVER": None}), LogNotifier)
    smtp = build_notifier({"MAIL_SERVER": "smtp.example", "MAIL_PORT": 2525, "FRONTEND_URL": "https://x/"})
    assert isinstance(smtp, SmtpNotifier)
    assert (smtp.host, smtp.port, smtp.frontend_url) == ("smtp.example", 2525, "https://x")


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.tls = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.tls = True

    def login(self, username, password):
        self.login_as = username

    def send_message(self, msg):
        FakeSMTP.sent.append((self, msg))


def test_smtp_notifier_sends_html(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(notifier_mod.smtplib, "SMTP", FakeSMTP)
    n = SmtpNotifier("smtp.example", username="mailer", password="pw", sender="shop@example.com")

    n.notify_order_created("buyer@example.com", SUMMARY)

    conn, msg = FakeSMTP.sent[0]
    assert conn.tls and conn.login_as == "mailer"
    assert msg["To"] == "buyer@example.com"
    assert msg["From"] == "shop@example.com"
    assert "AB12CD34EF" in msg.get_body(("html",)).get_content()


def test_notify_safely_logs_and_swallows(caplog):
    def notify_order_created(*args):
        raise OSError("connection refused")

    with caplog.at_level(logging.WARNING, logger="storefront.services.notifier"):
        notify_safely(notify_order_created, "a@example.com", SUMMARY)

    assert "notify_order_created failed" in caplog.text


def test_notify_safely_does_not_swallow_base_exceptions():
    def interrupted(*args):
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        notify_safely(interrupted)
