"""Models package initialization"""

from .base import Base, register_model
from .product import Product
from .category import Category
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatus, PaymentStatus, PaymentMethod
from .address import Address
from .wishlist import Wishlist, WishlistItem
from .review import Review
from .customer import Customer
from .settings import StoreSettings

# Register all models
register_model(Product)
register_model(Category)
register_model(Cart)
register_model(CartItem)
register_model(Order)
register_model(OrderItem)
register_model(Address)
register_model(Wishlist)
register_model(WishlistItem)
register_model(Review)
register_model(Customer)
register_model(StoreSettings)

# Export all models
__all__ = [
    "Base",
    "Product",
    "Category",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "Address",
    "Wishlist",
    "WishlistItem",
    "Review",
    "Customer",
    "StoreSettings",
]
