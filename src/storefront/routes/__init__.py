from storefront.routes.cart import cart_bp
from storefront.routes.categories import categories_bp
from storefront.routes.orders import orders_bp
from storefront.routes.products import products_bp

__all__ = ["cart_bp", "categories_bp", "orders_bp", "products_bp"]
