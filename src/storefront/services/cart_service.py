from sqlalchemy.engine import Connection

from storefront.core.exceptions import ConflictError, InsufficientStockError, NotFoundError
from storefront.domain.cart import Cart
from storefront.domain.product import Product
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository
import logging

logger = logging.getLogger(__name__)


class CartService:
    """
    Shopping cart business logic service

    Responsibilities:
    - Validate cart lines against the catalog
    - Capture the unit price when a product first enters the cart
    - Serialize concurrent writers through the cart version token
    """

    def __init__(self, cart_repository: CartRepository, product_repository: ProductRepository):
        self.cart_repo = cart_repository
        self.product_repo = product_repository

    def get_cart(self, user_id: int) -> Cart:
        """
        Get user's current cart

        A user without a cart gets an empty, unsaved placeholder rather than
        an error.
        """
        with self.cart_repo.connect() as conn:
            cart = self.cart_repo.get_by_user(conn, user_id)

        return cart if cart is not None else Cart.empty(user_id)

    def add_item(self, user_id: int, product_id: int, quantity: int) -> Cart:
        """
        Add a product to the cart, creating the cart on first use

        Business Rules:
        - Product must exist
        - The requested quantity (not the running cart total) must not
          exceed current stock; placement re-checks the full line quantity
        - Re-adding a product grows its line and keeps the original price
        """
        logger.info(f"Adding item to cart - user: {user_id}, product: {product_id}, quantity: {quantity}")

        with self.cart_repo.transaction() as conn:
            product = self._require_product(conn, product_id)
            self._require_stock(product, quantity)

            cart = self.cart_repo.get_by_user(conn, user_id)
            if cart is None:
                cart = self.cart_repo.create(conn, user_id)

            self._claim(conn, cart)

            if cart.get_item(product_id) is not None:
                self.cart_repo.increment_line(conn, cart.cart_id, product_id, quantity)
            else:
                self.cart_repo.add_line(conn, cart.cart_id, product_id, quantity, product.price_cents)

            return self.cart_repo.get_by_user(conn, user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Cart:
        """Set a line's quantity (replace, not increment)."""
        logger.info(f"Updating cart line for user {user_id}, product {product_id} to quantity {quantity}")

        with self.cart_repo.transaction() as conn:
            product = self._require_product(conn, product_id)
            self._require_stock(product, quantity)

            cart = self.cart_repo.get_by_user(conn, user_id)
            if cart is None:
                raise NotFoundError("Cart", f"user_id={user_id}")

            if cart.get_item(product_id) is None:
                raise NotFoundError("Cart item", product_id)

            self._claim(conn, cart)
            self.cart_repo.set_line_quantity(conn, cart.cart_id, product_id, quantity)

            return self.cart_repo.get_by_user(conn, user_id)

    def remove_item(self, user_id: int, product_id: int) -> Cart:
        """
        Remove a product's line from the cart

        Removing a product that isn't in the cart is a no-op; only a missing
        cart is an error.
        """
        logger.info(f"Removing product {product_id} from cart of user {user_id}")

        with self.cart_repo.transaction() as conn:
            cart = self.cart_repo.get_by_user(conn, user_id)
            if cart is None:
                raise NotFoundError("Cart", f"user_id={user_id}")

            if cart.get_item(product_id) is None:
                return cart

            self._claim(conn, cart)
            self.cart_repo.remove_line(conn, cart.cart_id, product_id)

            return self.cart_repo.get_by_user(conn, user_id)

    # Private helper methods for business logic
    def _require_product(self, conn: Connection, product_id: int) -> Product:
        product = self.product_repo.get_by_id(conn, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def _require_stock(self, product: Product, quantity: int) -> None:
        if not product.can_supply(quantity):
            logger.warning(
                f"Rejected quantity {quantity} for product {product.product_id}: only {product.stock} in stock"
            )
            raise InsufficientStockError(product.name, product.stock, quantity)

    def _claim(self, conn: Connection, cart: Cart) -> None:
        if not self.cart_repo.bump_version(conn, cart.cart_id, cart.version):
            logger.warning(f"Cart {cart.cart_id} changed concurrently (expected version {cart.version})")
            raise ConflictError("Cart was modified by another request, please retry", conflict_field="version")
        cart.version += 1
