from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import JSON, DateTime
from sqlalchemy.engine import Connection

from storefront.domain.product import CategoryRef, Product
from storefront.repositories.base import BaseRepository
import logging

logger = logging.getLogger(__name__)

PRODUCT_RESULT_TYPES = {
    "images": JSON(),
    "created_at": DateTime(timezone=True),
    "updated_at": DateTime(timezone=True),
}

PRODUCT_SELECT = """
SELECT
    p.id as product_id,
    p.name,
    p.description,
    p.price_cents,
    p.stock,
    p.category_id,
    c.name as category_name,
    p.images,
    p.ratings,
    p.num_reviews,
    p.created_at,
    p.updated_at
FROM products p
LEFT JOIN categories c ON c.id = p.category_id
"""

# Columns an admin patch may touch; anything else is ignored.
UPDATABLE_FIELDS = ("name", "description", "price_cents", "category_id", "stock", "images")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository(BaseRepository):
    """Repository for catalog product operations"""

    @property
    def table_name(self) -> str:
        return "products"

    def get_by_id(self, conn: Connection, product_id: int) -> Optional[Product]:
        row = self.fetch_one(
            conn,
            PRODUCT_SELECT + " WHERE p.id = :product_id",
            {"product_id": product_id},
            types=PRODUCT_RESULT_TYPES,
        )
        return self._build_product(row) if row else None

    def list_products(
        self,
        conn: Connection,
        limit: int,
        offset: int = 0,
        keyword: Optional[str] = None,
        category_id: Optional[int] = None
    ) -> Tuple[List[Product], int]:
        """
        Filtered page of products plus the total number of matches

        keyword is a case-insensitive substring match on the product name;
        LIKE wildcards in it are matched literally.
        """
        where_clauses = []
        params: Dict[str, Any] = {}

        if keyword:
            where_clauses.append("LOWER(p.name) LIKE :keyword ESCAPE '\\'")
            params["keyword"] = f"%{_escape_like(keyword.lower())}%"
        if category_id is not None:
            where_clauses.append("p.category_id = :category_id")
            params["category_id"] = category_id

        where_sql = (" WHERE " + " AND ".join(where_clauses)) if where_clauses else ""

        total = self.scalar(
            conn,
            "SELECT COUNT(*) FROM products p" + where_sql,
            params,
        )
        total = int(total or 0)
        if offset >= total:
            # Past the last page; oversized offsets never reach the driver.
            return [], total

        rows = self.fetch_all(
            conn,
            PRODUCT_SELECT + where_sql + " ORDER BY p.id LIMIT :limit OFFSET :offset",
            {**params, "limit": limit, "offset": offset},
            types=PRODUCT_RESULT_TYPES,
        )

        return [self._build_product(row) for row in rows], total

    def create(
        self,
        conn: Connection,
        name: str,
        description: str,
        price_cents: int,
        category_id: int,
        stock: int,
        images: List[Dict[str, Any]]
    ) -> int:
        command = """
        INSERT INTO products (
            name, description, price_cents, category_id, stock,
            images, ratings, num_reviews
        )
        VALUES (
            :name, :description, :price_cents, :category_id, :stock,
            :images, 0, 0
        )
        """
        return self.insert_returning_id(
            conn,
            command,
            {
                "name": name,
                "description": description,
                "price_cents": price_cents,
                "category_id": category_id,
                "stock": stock,
                "images": images,
            },
            json_params=("images",),
        )

    def update(self, conn: Connection, product_id: int, changes: Dict[str, Any]) -> int:
        """
        Apply a partial update

        Only keys present in ``changes`` are written, so falsy values such as
        a price of 0 are applied rather than skipped.
        """
        fields = [name for name in UPDATABLE_FIELDS if name in changes]
        if not fields:
            return 1 if self.exists(conn, product_id) else 0

        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        command = f"""
        UPDATE products
        SET {assignments}, updated_at = CURRENT_TIMESTAMP
        WHERE id = :product_id
        """
        params = {name: changes[name] for name in fields}
        params["product_id"] = product_id

        return self.execute(
            conn,
            command,
            params,
            json_params=("images",) if "images" in fields else (),
        )

    def delete(self, conn: Connection, product_id: int) -> int:
        return self.execute(
            conn, "DELETE FROM products WHERE id = :product_id", {"product_id": product_id}
        )

    def decrement_stock(self, conn: Connection, product_id: int, quantity: int) -> bool:
        """
        Conditionally take ``quantity`` units out of stock

        The WHERE guard makes check-and-decrement a single statement, so two
        concurrent placements can never drive stock below zero.

        Returns:
            False when the product is missing or has too little stock
        """
        command = """
        UPDATE products
        SET stock = stock - :quantity, updated_at = CURRENT_TIMESTAMP
        WHERE id = :product_id AND stock >= :quantity
        """
        affected = self.execute(conn, command, {"product_id": product_id, "quantity": quantity})
        if affected == 0:
            logger.warning(f"Stock decrement of {quantity} refused for product {product_id}")
        return affected == 1

    def _build_product(self, row: Dict[str, Any]) -> Product:
        category = None
        if row["category_id"] is not None and row["category_name"] is not None:
            category = CategoryRef(category_id=row["category_id"], name=row["category_name"])

        return Product(
            product_id=row["product_id"],
            name=row["name"],
            description=row["description"],
            price_cents=row["price_cents"],
            stock=row["stock"],
            category_id=row["category_id"],
            category=category,
            images=row["images"] or [],
            ratings=float(row["ratings"] or 0),
            num_reviews=row["num_reviews"] or 0,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
