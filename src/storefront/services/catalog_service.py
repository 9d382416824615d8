from typing import Any, Dict, List, Optional

from storefront.core.exceptions import ConflictError, NotFoundError
from storefront.domain.product import Category, Product, ProductPage
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.product_repository import ProductRepository
import logging

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Product catalog business logic

    Responsibilities:
    - Filtered, fixed-size product pages
    - Admin product maintenance with explicit patch semantics
    """

    def __init__(
        self,
        product_repository: ProductRepository,
        category_repository: CategoryRepository,
        page_size: int = 10
    ):
        self.product_repo = product_repository
        self.category_repo = category_repository
        self.page_size = page_size

    def list_products(
        self,
        page: int = 1,
        keyword: Optional[str] = None,
        category_id: Optional[int] = None
    ) -> ProductPage:
        """
        One page of products, optionally filtered

        Pages are 1-based; anything below 1 is treated as the first page.
        """
        page = max(page, 1)
        keyword = (keyword or "").strip() or None

        with self.product_repo.connect() as conn:
            products, total = self.product_repo.list_products(
                conn,
                limit=self.page_size,
                offset=self.page_size * (page - 1),
                keyword=keyword,
                category_id=category_id,
            )

        return ProductPage(products=products, page=page, total=total, page_size=self.page_size)

    def get_product(self, product_id: int) -> Product:
        with self.product_repo.connect() as conn:
            product = self.product_repo.get_by_id(conn, product_id)

        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def create_product(
        self,
        name: str,
        description: str,
        price_cents: int,
        category_id: int,
        stock: int = 0,
        images: Optional[List[Dict[str, Any]]] = None
    ) -> Product:
        with self.product_repo.transaction() as conn:
            if not self.category_repo.exists(conn, category_id):
                raise NotFoundError("Category", category_id)

            product_id = self.product_repo.create(
                conn,
                name=name,
                description=description,
                price_cents=price_cents,
                category_id=category_id,
                stock=stock,
                images=images or [],
            )
            product = self.product_repo.get_by_id(conn, product_id)

        logger.info(f"Created product {product_id} ({name!r}) with stock {stock}")
        return product

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> Product:
        """
        Patch a product

        ``changes`` holds only the fields the caller sent; a field that is
        present is written even when falsy (price 0, stock 0).
        """
        with self.product_repo.transaction() as conn:
            if not self.product_repo.exists(conn, product_id):
                raise NotFoundError("Product", product_id)

            if "category_id" in changes and not self.category_repo.exists(conn, changes["category_id"]):
                raise NotFoundError("Category", changes["category_id"])

            self.product_repo.update(conn, product_id, changes)
            product = self.product_repo.get_by_id(conn, product_id)

        logger.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    def delete_product(self, product_id: int) -> None:
        with self.product_repo.transaction() as conn:
            if self.product_repo.delete(conn, product_id) == 0:
                raise NotFoundError("Product", product_id)

        logger.info(f"Deleted product {product_id}")


class CategoryService:
    """Category maintenance; deleting a category never cascades to products."""

    def __init__(self, category_repository: CategoryRepository):
        self.category_repo = category_repository

    def list_categories(self) -> List[Category]:
        with self.category_repo.connect() as conn:
            return self.category_repo.list_all(conn)

    def get_category(self, category_id: int) -> Category:
        with self.category_repo.connect() as conn:
            category = self.category_repo.get_by_id(conn, category_id)

        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_category(self, name: str, description: str) -> Category:
        with self.category_repo.transaction() as conn:
            if self.category_repo.name_taken(conn, name):
                raise ConflictError(f"Category {name!r} already exists", conflict_field="name")

            category_id = self.category_repo.create(conn, name=name, description=description)
            category = self.category_repo.get_by_id(conn, category_id)

        logger.info(f"Created category {category_id} ({name!r})")
        return category

    def update_category(self, category_id: int, changes: Dict[str, Any]) -> Category:
        with self.category_repo.transaction() as conn:
            if not self.category_repo.exists(conn, category_id):
                raise NotFoundError("Category", category_id)

            if "name" in changes and self.category_repo.name_taken(conn, changes["name"], exclude_id=category_id):
                raise ConflictError(f"Category {changes['name']!r} already exists", conflict_field="name")

            self.category_repo.update(conn, category_id, changes)
            return self.category_repo.get_by_id(conn, category_id)

    def delete_category(self, category_id: int) -> None:
        with self.category_repo.transaction() as conn:
            if self.category_repo.delete(conn, category_id) == 0:
                raise NotFoundError("Category", category_id)

        logger.info(f"Deleted category {category_id}")
