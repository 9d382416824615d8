# These classes only describe the schema for Base.metadata.create_all();
# repositories query the tables with raw SQL.

from storefront.models.cart import Cart, CartItem
from storefront.models.catalog import Category, Product
from storefront.models.order import Order, OrderItem

__all__ = [
    "Category",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
]
