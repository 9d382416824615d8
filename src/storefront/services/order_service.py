from typing import Any, Dict, List, Optional

from storefront.core.exceptions import (
    ConflictError, EmptyCartError, InsufficientStockError, NotFoundError, UnauthorizedError
)
from storefront.core.security import Identity
from storefront.domain.cart import Cart
from storefront.domain.order import Order, OrderItem
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
import logging

logger = logging.getLogger(__name__)


class OrderService:
    """
    Order placement and order administration

    Placement runs as one transaction: stock checks, conditional stock
    decrements, the order insert and the cart delete either all commit or
    all roll back.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        cart_repository: CartRepository,
        product_repository: ProductRepository
    ):
        self.order_repo = order_repository
        self.cart_repo = cart_repository
        self.product_repo = product_repository

    def place_order(
        self,
        user_id: int,
        shipping_address: Dict[str, Any],
        payment_method: str
    ) -> Order:
        """
        Convert the user's cart into an order

        Steps:
        1. Load the cart with live stock per line; no cart or no lines fails
        2. Every line quantity must be covered by current stock
        3. Snapshot lines using the price captured in the cart
        4. Take stock with a conditional decrement per line
        5. Insert the order with the cart total
        6. Delete the cart
        """
        logger.info(f"Placing order for user {user_id}")

        with self.order_repo.transaction() as conn:
            cart = self.cart_repo.get_by_user(conn, user_id)
            if cart is None or cart.is_empty:
                logger.warning(f"Order rejected for user {user_id}: cart is empty")
                raise EmptyCartError()

            for line in cart.items:
                if line.product_name is None:
                    raise NotFoundError("Product", line.product_id)
                if line.quantity > line.product_stock:
                    logger.warning(
                        f"Order rejected for user {user_id}: product {line.product_id} has "
                        f"{line.product_stock} in stock, {line.quantity} requested"
                    )
                    raise InsufficientStockError(line.product_name, line.product_stock, line.quantity)

            order_items = self._snapshot_lines(cart)

            for line in cart.items:
                # Another placement may have taken the stock since the read above.
                if not self.product_repo.decrement_stock(conn, line.product_id, line.quantity):
                    current = self.product_repo.get_by_id(conn, line.product_id)
                    raise InsufficientStockError(
                        line.product_name, current.stock if current else 0, line.quantity
                    )

            order_id = self.order_repo.create(
                conn,
                user_id=user_id,
                items=order_items,
                shipping_address=shipping_address,
                payment_method=payment_method,
                total_cents=cart.total_cents,
            )

            if not self.cart_repo.delete(conn, cart.cart_id, cart.version):
                raise ConflictError("Cart was modified while the order was being placed, please retry")

            order = self.order_repo.get_by_id(conn, order_id)

        logger.info(
            f"Placed order {order_id} for user {user_id}: {len(order_items)} lines, total={cart.total_cents}¢"
        )
        return order

    def list_orders(self, user_id: int) -> List[Order]:
        with self.order_repo.connect() as conn:
            return self.order_repo.list_by_user(conn, user_id)

    def get_order(self, order_id: int, identity: Identity) -> Order:
        """Fetch an order visible to ``identity``: its owner, or any admin."""
        with self.order_repo.connect() as conn:
            order = self.order_repo.get_by_id(conn, order_id)

        if order is None:
            raise NotFoundError("Order", order_id)

        if not (identity.is_admin or order.is_owned_by(identity.user_id)):
            logger.warning(f"User {identity.user_id} denied access to order {order_id}")
            raise UnauthorizedError("Not authorized to view this order")

        return order

    def update_status(
        self,
        order_id: int,
        order_status: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> Order:
        """
        Overwrite order and/or payment status

        None or empty values leave the stored status unchanged. No
        transition rules apply; any status may follow any other.
        """
        changes = {}
        if order_status:
            changes["order_status"] = order_status
        if payment_status:
            changes["payment_status"] = payment_status

        with self.order_repo.transaction() as conn:
            if self.order_repo.update_status(conn, order_id, changes) == 0:
                raise NotFoundError("Order", order_id)
            order = self.order_repo.get_by_id(conn, order_id)

        logger.info(f"Order {order_id} status updated: {changes}")
        return order

    def _snapshot_lines(self, cart: Cart) -> List[OrderItem]:
        return [
            OrderItem(
                product_id=line.product_id,
                name=line.product_name,
                quantity=line.quantity,
                price_cents=line.price_cents,
            )
            for line in cart.items
        ]
