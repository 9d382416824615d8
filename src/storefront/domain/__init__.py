from .product import Category, CategoryRef, Product, ProductPage
from .cart import Cart, CartItem
from .order import Order, OrderItem

__all__ = [
    "Category", "CategoryRef", "Product", "ProductPage",
    "Cart", "CartItem",
    "Order", "OrderItem"
]
