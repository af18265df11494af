# --- storefront/__init__.py ---
from flask import Flask, jsonify
from datetime import datetime, timezone

from .config import Config
from .extensions import db, jwt, cors, migrate


def create_app(config_class=Config, **overrides):
    """
    Application factory.

    ``config_class``: Config subclass to load; ``overrides`` are applied last
    (e.g. ``SQLALCHEMY_DATABASE_URI`` in tests).
    """
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(config_class)
    config_class.init_app(app)
    app.config.update(overrides)

    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024

    from .utils.logger import setup_logger
    logger = setup_logger(app.config["LOG_LEVEL"], app.config.get("LOG_DIR"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"].split(",")}})
    migrate.init_app(app, db)

    from .services.notifier import init_notifier
    init_notifier(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .category import bp as category_bp; app.register_blueprint(category_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp)
    from .settings import bp as settings_bp; app.register_blueprint(settings_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/api/health")
    def health():
        return jsonify(
            status="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            environment=app.config.get("ENV"),
        )

    with app.app_context():
        db.create_all()

    logger.info("storefront started (db=%s)", app.config["SQLALCHEMY_DATABASE_URI"].split("://")[0])
    return app
