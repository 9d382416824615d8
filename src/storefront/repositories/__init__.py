from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository

__all__ = ["CartRepository", "CategoryRepository", "OrderRepository", "ProductRepository"]
