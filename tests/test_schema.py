"""Schema created by init_schema: tables, keys and guards the SQL relies on."""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError


@pytest.fixture
def engine(container) -> Engine:
    return container.get(Engine)


class TestSchema:
    def test_all_tables_exist(self, engine):
        tables = set(inspect(engine).get_table_names())

        assert {"categories", "products", "carts", "cart_items", "orders", "order_items"} <= tables

    def test_cart_lines_cascade_with_their_cart(self, engine):
        foreign_keys = inspect(engine).get_foreign_keys("cart_items")

        by_table = {fk["referred_table"]: fk for fk in foreign_keys}
        assert by_table["carts"]["options"].get("ondelete") == "CASCADE"
        assert by_table["products"]["options"].get("ondelete") == "CASCADE"

    def test_order_lines_do_not_reference_products(self, engine):
        referred = {fk["referred_table"] for fk in inspect(engine).get_foreign_keys("order_items")}

        assert referred == {"orders"}

    def test_products_have_no_category_foreign_key(self, engine):
        assert inspect(engine).get_foreign_keys("products") == []

    def test_one_cart_per_user(self, engine):
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(text("INSERT INTO carts (user_id, version) VALUES (5, 1)"))
                conn.execute(text("INSERT INTO carts (user_id, version) VALUES (5, 1)"))

    def test_stock_cannot_go_negative(self, engine, make_product):
        product = make_product(stock=1)

        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(
                    text("UPDATE products SET stock = -1 WHERE id = :id"), {"id": product.product_id}
                )
