# storefront/config.py
import os
from datetime import timedelta


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # order placement
    MIN_ADDRESS_LENGTH = int(os.getenv("MIN_ADDRESS_LENGTH", "10"))
    LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))

    # storefront settings row created on first read
    DEFAULT_ADMIN_PHONE = os.getenv("DEFAULT_ADMIN_PHONE", "+5491123456789")
    DEFAULT_WHATSAPP_MESSAGE = os.getenv(
        "DEFAULT_WHATSAPP_MESSAGE", "Hello, I have a question about my order"
    )

    # mail; no MAIL_SERVER means messages are only logged
    MAIL_SERVER = os.getenv("MAIL_SERVER")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@storefront.local")
    MAIL_TIMEOUT = int(os.getenv("MAIL_TIMEOUT", "10"))
    NOTIFY_ASYNC = _env_bool("NOTIFY_ASYNC", True)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR")  # unset: console only

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestingConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    NOTIFY_ASYNC = False
    MAIL_SERVER = None
    LOG_DIR = None

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
