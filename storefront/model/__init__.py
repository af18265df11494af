# ------ storefront/model/__init__.py ------

from .user import User
from .category import Category
from .product import Product
from .cart import CartItem
from .order import Order, OrderItem, OrderStatus
from .settings import AppSettings

__all__ = [
    "User",
    "Category",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "AppSettings",
]
