from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime
from sqlalchemy.engine import Connection

from storefront.domain.order import DEFAULT_ORDER_STATUS, DEFAULT_PAYMENT_STATUS, Order, OrderItem
from storefront.repositories.base import BaseRepository

ORDER_RESULT_TYPES = {
    "shipping_address": JSON(),
    "created_at": DateTime(timezone=True),
    "updated_at": DateTime(timezone=True),
}

ORDER_SELECT = """
SELECT
    id as order_id,
    user_id,
    shipping_address,
    payment_method,
    total_cents,
    order_status,
    payment_status,
    created_at,
    updated_at
FROM orders
"""


class OrderRepository(BaseRepository):
    """Repository for placed orders and their line snapshots"""

    @property
    def table_name(self) -> str:
        return "orders"

    def create(
        self,
        conn: Connection,
        user_id: int,
        items: List[OrderItem],
        shipping_address: Dict[str, Any],
        payment_method: str,
        total_cents: int
    ) -> int:
        order_id = self.insert_returning_id(
            conn,
            """
            INSERT INTO orders (
                user_id, shipping_address, payment_method, total_cents,
                order_status, payment_status
            )
            VALUES (
                :user_id, :shipping_address, :payment_method, :total_cents,
                :order_status, :payment_status
            )
            """,
            {
                "user_id": user_id,
                "shipping_address": shipping_address,
                "payment_method": payment_method,
                "total_cents": total_cents,
                "order_status": DEFAULT_ORDER_STATUS,
                "payment_status": DEFAULT_PAYMENT_STATUS,
            },
            json_params=("shipping_address",),
        )

        for item in items:
            self.execute(
                conn,
                """
                INSERT INTO order_items (order_id, product_id, name, price_cents, quantity)
                VALUES (:order_id, :product_id, :name, :price_cents, :quantity)
                """,
                {
                    "order_id": order_id,
                    "product_id": item.product_id,
                    "name": item.name,
                    "price_cents": item.price_cents,
                    "quantity": item.quantity,
                },
            )

        return order_id

    def get_by_id(self, conn: Connection, order_id: int) -> Optional[Order]:
        row = self.fetch_one(
            conn,
            ORDER_SELECT + " WHERE id = :order_id",
            {"order_id": order_id},
            types=ORDER_RESULT_TYPES,
        )
        if not row:
            return None

        items = self._fetch_items(conn, "oi.order_id = :order_id", {"order_id": order_id})
        return self._build_order(row, items.get(order_id, []))

    def list_by_user(self, conn: Connection, user_id: int) -> List[Order]:
        """User's orders, most recent first"""
        rows = self.fetch_all(
            conn,
            ORDER_SELECT + " WHERE user_id = :user_id ORDER BY created_at DESC, id DESC",
            {"user_id": user_id},
            types=ORDER_RESULT_TYPES,
        )
        items = self._fetch_items(
            conn,
            "oi.order_id IN (SELECT id FROM orders WHERE user_id = :user_id)",
            {"user_id": user_id},
        )
        return [self._build_order(row, items.get(row["order_id"], [])) for row in rows]

    def update_status(self, conn: Connection, order_id: int, changes: Dict[str, str]) -> int:
        fields = [name for name in ("order_status", "payment_status") if name in changes]
        if not fields:
            return 1 if self.exists(conn, order_id) else 0

        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        params: Dict[str, Any] = {name: changes[name] for name in fields}
        params["order_id"] = order_id
        return self.execute(
            conn,
            f"UPDATE orders SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :order_id",
            params,
        )

    def _fetch_items(
        self,
        conn: Connection,
        condition: str,
        params: Dict[str, Any]
    ) -> Dict[int, List[OrderItem]]:
        rows = self.fetch_all(
            conn,
            f"""
            SELECT oi.order_id, oi.product_id, oi.name, oi.quantity, oi.price_cents
            FROM order_items oi
            WHERE {condition}
            ORDER BY oi.id
            """,
            params,
        )
        grouped: Dict[int, List[OrderItem]] = defaultdict(list)
        for row in rows:
            grouped[row["order_id"]].append(OrderItem(
                product_id=row["product_id"],
                name=row["name"],
                quantity=row["quantity"],
                price_cents=row["price_cents"],
            ))
        return grouped

    def _build_order(self, row: Dict[str, Any], items: List[OrderItem]) -> Order:
        return Order(
            order_id=row["order_id"],
            user_id=row["user_id"],
            total_cents=row["total_cents"],
            payment_method=row["payment_method"],
            shipping_address=row["shipping_address"] or {},
            order_status=row["order_status"],
            payment_status=row["payment_status"],
            items=items,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
