from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime
from sqlalchemy.engine import Connection

from storefront.domain.product import Category
from storefront.repositories.base import BaseRepository

CATEGORY_RESULT_TYPES = {
    "created_at": DateTime(timezone=True),
    "updated_at": DateTime(timezone=True),
}

CATEGORY_SELECT = """
SELECT id as category_id, name, description, created_at, updated_at
FROM categories
"""


class CategoryRepository(BaseRepository):
    """Repository for product categories"""

    @property
    def table_name(self) -> str:
        return "categories"

    def list_all(self, conn: Connection) -> List[Category]:
        rows = self.fetch_all(conn, CATEGORY_SELECT + " ORDER BY name", types=CATEGORY_RESULT_TYPES)
        return [Category(**row) for row in rows]

    def get_by_id(self, conn: Connection, category_id: int) -> Optional[Category]:
        row = self.fetch_one(
            conn,
            CATEGORY_SELECT + " WHERE id = :category_id",
            {"category_id": category_id},
            types=CATEGORY_RESULT_TYPES,
        )
        return Category(**row) if row else None

    def name_taken(self, conn: Connection, name: str, exclude_id: Optional[int] = None) -> bool:
        query = "SELECT 1 FROM categories WHERE name = :name"
        params: Dict[str, Any] = {"name": name}
        if exclude_id is not None:
            query += " AND id <> :exclude_id"
            params["exclude_id"] = exclude_id
        return self.scalar(conn, query, params) is not None

    def create(self, conn: Connection, name: str, description: str) -> int:
        return self.insert_returning_id(
            conn,
            "INSERT INTO categories (name, description) VALUES (:name, :description)",
            {"name": name, "description": description},
        )

    def update(self, conn: Connection, category_id: int, changes: Dict[str, Any]) -> int:
        fields = [name for name in ("name", "description") if name in changes]
        if not fields:
            return 1 if self.exists(conn, category_id) else 0

        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        params = {name: changes[name] for name in fields}
        params["category_id"] = category_id
        return self.execute(
            conn,
            f"UPDATE categories SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :category_id",
            params,
        )

    def delete(self, conn: Connection, category_id: int) -> int:
        return self.execute(
            conn, "DELETE FROM categories WHERE id = :category_id", {"category_id": category_id}
        )
