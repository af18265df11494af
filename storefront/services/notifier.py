# storefront/services/notifier.py
"""
Transactional email.

The notifier raises on delivery failure; callers that must not fail
(order placement, status updates) wrap it with ``notify_safely``.
"""
import logging
import smtplib
import threading
from email.message import EmailMessage
from html import escape

from flask import current_app

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "CONFIRMED": ("Order confirmed", "Your order has been confirmed and will be processed soon."),
    "PROCESSING": ("Preparing your order", "We are preparing your order for shipping."),
    "SHIPPED": ("Order shipped", "Your order is on its way."),
    "DELIVERED": ("Order delivered", "Your order has been delivered. Enjoy your purchase!"),
    "CANCELLED": ("Order cancelled", "Your order has been cancelled. Contact us if you have any questions."),
}


class Notifier:
    def notify_order_created(self, email: str, summary: dict) -> None:
        raise NotImplementedError

    def notify_status_changed(self, email: str, summary: dict) -> None:
        raise NotImplementedError


def _short_id(summary):
    return str(summary["id"]).rjust(8, "0")[-8:]


def render_order_created(summary: dict, frontend_url: str) -> tuple[str, str]:
    rows = "".join(
        f"<tr><td>{escape(i['product_name'])}</td><td>{i['quantity']}</td>"
        f"<td>${i['unit_price']}</td><td>${i['line_total']}</td></tr>"
        for i in summary["items"]
    )
    code = escape(summary["tracking_code"])
    subject = f"Order confirmation #{_short_id(summary)}"
    html = (
        "<h1>Thank you for your order!</h1>"
        f"<p><strong>Order:</strong> #{_short_id(summary)}<br>"
        f"<strong>Total:</strong> ${summary['total']}</p>"
        f"<p>Tracking code: <code>{code}</code></p>"
        "<table><thead><tr><th>Product</th><th>Quantity</th><th>Unit price</th><th>Subtotal</th></tr></thead>"
        f"<tbody>{rows}<tr><td colspan=\"3\">TOTAL</td><td>${summary['total']}</td></tr></tbody></table>"
        f"<p><a href=\"{escape(frontend_url)}/track?code={code}\">Track your order</a></p>"
    )
    return subject, html


def render_status_changed(summary: dict, frontend_url: str) -> tuple[str, str] | None:
    info = STATUS_MESSAGES.get(summary["status"])
    if not info:
        return None
    title, message = info
    code = escape(summary["tracking_code"])
    subject = f"{title} - Order #{_short_id(summary)}"
    html = (
        f"<h1>{title}</h1>"
        f"<p>Hello {escape(summary.get('customer_name') or '')},</p>"
        f"<p>{message}</p>"
        f"<p><strong>Order:</strong> #{_short_id(summary)}<br>"
        f"<strong>Tracking code:</strong> {code}</p>"
        f"<p><a href=\"{escape(frontend_url)}/track?code={code}\">View order status</a></p>"
    )
    return subject, html


class SmtpNotifier(Notifier):
    def __init__(self, host, port=587, *, use_tls=True, username=None, password=None,
                 sender="no-reply@storefront.local", frontend_url="", timeout=10):
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.username = username
        self.password = password
        self.sender = sender
        self.frontend_url = frontend_url.rstrip("/")
        self.timeout = timeout

    def _send(self, to, subject, html):
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)

    def notify_order_created(self, email, summary):
        subject, html = render_order_created(summary, self.frontend_url)
        self._send(email, subject, html)
        logger.info("confirmation email sent to %s for order %s", email, summary["id"])

    def notify_status_changed(self, email, summary):
        rendered = render_status_changed(summary, self.frontend_url)
        if rendered is None:
            return
        self._send(email, *rendered)
        logger.info("status email (%s) sent to %s for order %s", summary["status"], email, summary["id"])


class LogNotifier(Notifier):
    """Used when no MAIL_SERVER is configured: logs instead of sending."""

    def notify_order_created(self, email, summary):
        logger.info("[mail disabled] order %s confirmation for %s (tracking %s, total %s)",
                    summary["id"], email, summary["tracking_code"], summary["total"])

    def notify_status_changed(self, email, summary):
        logger.info("[mail disabled] order %s is now %s, would notify %s",
                    summary["id"], summary["status"], email)


def build_notifier(config) -> Notifier:
    if not config.get("MAIL_SERVER"):
        return LogNotifier()
    return SmtpNotifier(
        config["MAIL_SERVER"],
        config.get("MAIL_PORT", 587),
        use_tls=config.get("MAIL_USE_TLS", True),
        username=config.get("MAIL_USERNAME"),
        password=config.get("MAIL_PASSWORD"),
        sender=config.get("MAIL_FROM", "no-reply@storefront.local"),
        frontend_url=config.get("FRONTEND_URL", ""),
        timeout=config.get("MAIL_TIMEOUT", 10),
    )


def init_notifier(app):
    app.extensions["notifier"] = build_notifier(app.config)


def get_notifier() -> Notifier:
    return current_app.extensions["notifier"]


def notify_safely(send, *args, run_async=False):
    """
    Post-commit, at-most-once attempt. Failures are logged and swallowed;
    with ``run_async`` the attempt runs on a daemon thread nobody joins.
    """
    def attempt():
        try:
            send(*args)
        except Exception:
            logger.warning("notification %s failed", getattr(send, "__name__", send), exc_info=True)

    if run_async:
        threading.Thread(target=attempt, daemon=True).start()
    else:
        attempt()
