# storefront/errors.py
"""
Error taxonomy.

Input-validation errors are raised before any storage access, business-rule
errors after a read but before a committed write. Blueprints let them bubble
up; ``register_error_handlers`` turns them into the standard API envelope.
"""
import logging

from flask import request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .utils.api import err

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 400
    message = "request failed"

    def __init__(self, message=None, **payload):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.payload = payload


class ValidationError(StorefrontError):
    status_code = 400
    message = "invalid input"

    def __init__(self, message=None, field=None, **payload):
        if field:
            payload["field"] = field
        super().__init__(message, **payload)


class NotFoundError(StorefrontError):
    status_code = 404
    message = "not found"


class ConflictError(StorefrontError):
    status_code = 409
    message = "conflict"


class EmptyCartError(StorefrontError):
    status_code = 400
    message = "Cart is empty"


class ProductUnavailableError(StorefrontError):
    status_code = 409

    def __init__(self, product_id, product_name=None):
        name = product_name or f"#{product_id}"
        super().__init__(
            f"Product {name} is no longer available",
            product_id=product_id,
            product_name=product_name,
        )
        self.product_id = product_id
        self.product_name = product_name


class InsufficientStockError(StorefrontError):
    status_code = 409

    def __init__(self, product_id, product_name, available, requested):
        super().__init__(
            f"Not enough stock for {product_name}. Available: {available}, Requested: {requested}",
            product_id=product_id,
            product_name=product_name,
            available=available,
            requested=requested,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class InvalidStatusTransitionError(StorefrontError):
    status_code = 409

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot change order status from {current} to {requested}",
            current=current,
            requested=requested,
        )
        self.current = current
        self.requested = requested


def register_error_handlers(app):
    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e):
        return err(e.message, e.status_code, e.payload)

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(e):
        db.session.rollback()
        logger.exception("storage failure on %s %s", request.method, request.path)
        return err("Storage unavailable, please retry", 503)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return err(e.description or e.name, e.code or 500)
