from typing import Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlalchemy.engine import Connection

from storefront.domain.cart import Cart, CartItem
from storefront.repositories.base import BaseRepository
import logging

logger = logging.getLogger(__name__)


class CartRepository(BaseRepository):
    """
    Repository for shopping cart operations

    Every write that changes a cart goes through ``bump_version`` first, so
    a caller holding a stale version finds out before touching any line.
    """

    @property
    def table_name(self) -> str:
        return "carts"

    def get_by_user(self, conn: Connection, user_id: int) -> Optional[Cart]:
        """
        Get user's cart with all lines, in the order they were added

        Each line carries the product's name, images and live stock next to
        the price captured when the line was created.
        """
        cart_row = self.fetch_one(
            conn,
            "SELECT id, user_id, version FROM carts WHERE user_id = :user_id",
            {"user_id": user_id},
        )
        if not cart_row:
            return None

        query = """
        SELECT
            ci.product_id,
            ci.quantity,
            ci.price_cents,
            p.name as product_name,
            COALESCE(p.stock, 0) as product_stock,
            p.images
        FROM cart_items ci
        LEFT JOIN products p ON p.id = ci.product_id
        WHERE ci.cart_id = :cart_id
        ORDER BY ci.id
        """
        rows = self.fetch_all(conn, query, {"cart_id": cart_row["id"]}, types={"images": JSON()})

        return Cart(
            cart_id=cart_row["id"],
            user_id=cart_row["user_id"],
            version=cart_row["version"],
            items=[self._build_item(row) for row in rows],
        )

    def create(self, conn: Connection, user_id: int) -> Cart:
        """
        Create an empty cart

        A concurrent create for the same user trips the UNIQUE constraint on
        user_id, which the transaction reports as a conflict.
        """
        cart_id = self.insert_returning_id(
            conn,
            "INSERT INTO carts (user_id, version) VALUES (:user_id, 1)",
            {"user_id": user_id},
        )
        logger.info(f"Created cart {cart_id} for user {user_id}")
        return Cart(cart_id=cart_id, user_id=user_id, version=1)

    def bump_version(self, conn: Connection, cart_id: int, expected_version: int) -> bool:
        """Advance the version token; False if someone else already did."""
        command = """
        UPDATE carts
        SET version = version + 1, updated_at = CURRENT_TIMESTAMP
        WHERE id = :cart_id AND version = :expected_version
        """
        affected = self.execute(
            conn, command, {"cart_id": cart_id, "expected_version": expected_version}
        )
        return affected == 1

    def add_line(
        self,
        conn: Connection,
        cart_id: int,
        product_id: int,
        quantity: int,
        price_cents: int
    ) -> None:
        self.execute(
            conn,
            """
            INSERT INTO cart_items (cart_id, product_id, quantity, price_cents)
            VALUES (:cart_id, :product_id, :quantity, :price_cents)
            """,
            {
                "cart_id": cart_id,
                "product_id": product_id,
                "quantity": quantity,
                "price_cents": price_cents,
            },
        )

    def increment_line(self, conn: Connection, cart_id: int, product_id: int, quantity: int) -> int:
        """Grow an existing line; the captured price is left alone."""
        return self.execute(
            conn,
            """
            UPDATE cart_items
            SET quantity = quantity + :quantity
            WHERE cart_id = :cart_id AND product_id = :product_id
            """,
            {"cart_id": cart_id, "product_id": product_id, "quantity": quantity},
        )

    def set_line_quantity(self, conn: Connection, cart_id: int, product_id: int, quantity: int) -> int:
        return self.execute(
            conn,
            """
            UPDATE cart_items
            SET quantity = :quantity
            WHERE cart_id = :cart_id AND product_id = :product_id
            """,
            {"cart_id": cart_id, "product_id": product_id, "quantity": quantity},
        )

    def remove_line(self, conn: Connection, cart_id: int, product_id: int) -> int:
        return self.execute(
            conn,
            "DELETE FROM cart_items WHERE cart_id = :cart_id AND product_id = :product_id",
            {"cart_id": cart_id, "product_id": product_id},
        )

    def delete(self, conn: Connection, cart_id: int, expected_version: int) -> bool:
        """
        Delete the cart and its lines

        Guarded by the version token so a cart modified after it was read
        is not silently discarded.
        """
        affected = self.execute(
            conn,
            "DELETE FROM carts WHERE id = :cart_id AND version = :expected_version",
            {"cart_id": cart_id, "expected_version": expected_version},
        )
        if affected == 1:
            # Not every backend enforces ON DELETE CASCADE (SQLite needs a pragma).
            self.execute(conn, "DELETE FROM cart_items WHERE cart_id = :cart_id", {"cart_id": cart_id})
        return affected == 1

    def _build_item(self, row: Dict[str, Any]) -> CartItem:
        images: List[Dict[str, Any]] = row["images"] or []
        return CartItem(
            product_id=row["product_id"],
            quantity=row["quantity"],
            price_cents=row["price_cents"],
            product_name=row["product_name"],
            product_stock=row["product_stock"],
            images=images,
        )
