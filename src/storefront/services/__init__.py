from storefront.services.cart_service import CartService
from storefront.services.catalog_service import CatalogService, CategoryService
from storefront.services.order_service import OrderService

__all__ = ["CartService", "CatalogService", "CategoryService", "OrderService"]
