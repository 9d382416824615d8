"""Service tests for CartService.

Covers:
- get_cart: placeholder for users without a cart
- add_item: creation, increment, price capture, stock check on the requested quantity
- update_item / remove_item: replace semantics, lookup order of failures
- version token: stale writers are rejected
"""

import pytest

from storefront.core.exceptions import ConflictError, InsufficientStockError, NotFoundError

ALICE = 2
BOB = 3


class TestGetCart:
    def test_user_without_cart_gets_empty_placeholder(self, carts):
        cart = carts.get_cart(ALICE)

        assert cart.cart_id is None
        assert cart.user_id == ALICE
        assert cart.items == []
        assert cart.total_cents == 0

    def test_reading_cart_changes_nothing(self, carts, make_product):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 2)

        first = carts.get_cart(ALICE)
        second = carts.get_cart(ALICE)

        assert first == second

    def test_carts_are_per_user(self, carts, make_product):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 1)

        assert carts.get_cart(BOB).is_empty
        assert carts.get_cart(ALICE).total_quantity == 1


class TestAddItem:
    def test_first_add_creates_cart_with_captured_price(self, carts, make_product):
        product = make_product(price_cents=2999, stock=20)

        cart = carts.add_item(ALICE, product.product_id, 2)

        assert cart.cart_id is not None
        assert len(cart.items) == 1
        line = cart.items[0]
        assert line.product_id == product.product_id
        assert line.quantity == 2
        assert line.price_cents == 2999
        assert line.product_name == "Monstera Deliciosa"
        assert cart.total_cents == 5998

    def test_re_adding_increments_existing_line(self, carts, make_product):
        product = make_product(stock=20)

        carts.add_item(ALICE, product.product_id, 2)
        cart = carts.add_item(ALICE, product.product_id, 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_increment_keeps_original_price(self, carts, catalog, make_product):
        product = make_product(price_cents=1000, stock=20)
        carts.add_item(ALICE, product.product_id, 1)

        catalog.update_product(product.product_id, {"price_cents": 1500})
        cart = carts.add_item(ALICE, product.product_id, 1)

        assert cart.items[0].price_cents == 1000
        assert cart.total_cents == 2000

    def test_lines_keep_insertion_order(self, carts, make_product):
        first = make_product(name="Aloe Vera")
        second = make_product(name="Rose Bush")

        carts.add_item(ALICE, second.product_id, 1)
        cart = carts.add_item(ALICE, first.product_id, 1)

        assert [line.product_id for line in cart.items] == [second.product_id, first.product_id]

    def test_quantity_above_stock_is_rejected(self, carts, make_product):
        product = make_product(stock=3)

        with pytest.raises(InsufficientStockError) as exc_info:
            carts.add_item(ALICE, product.product_id, 4)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Not enough stock for Monstera Deliciosa"
        assert carts.get_cart(ALICE).cart_id is None

    def test_only_requested_quantity_is_checked_against_stock(self, carts, make_product):
        product = make_product(stock=3)

        carts.add_item(ALICE, product.product_id, 2)
        cart = carts.add_item(ALICE, product.product_id, 2)

        assert cart.items[0].quantity == 4

    def test_unknown_product_is_not_found(self, carts):
        with pytest.raises(NotFoundError):
            carts.add_item(ALICE, 9999, 1)


class TestUpdateItem:
    def test_sets_quantity(self, carts, make_product):
        product = make_product(stock=10)
        carts.add_item(ALICE, product.product_id, 2)

        cart = carts.update_item(ALICE, product.product_id, 7)

        assert cart.items[0].quantity == 7

    def test_stock_is_checked_before_cart_lookup(self, carts, make_product):
        product = make_product(stock=1)

        with pytest.raises(InsufficientStockError):
            carts.update_item(ALICE, product.product_id, 5)

    def test_missing_cart_is_not_found(self, carts, make_product):
        product = make_product()

        with pytest.raises(NotFoundError) as exc_info:
            carts.update_item(ALICE, product.product_id, 1)

        assert "Cart not found" in exc_info.value.message

    def test_product_not_in_cart_is_not_found(self, carts, make_product):
        in_cart = make_product(name="Aloe Vera")
        other = make_product(name="Rose Bush")
        carts.add_item(ALICE, in_cart.product_id, 1)

        with pytest.raises(NotFoundError) as exc_info:
            carts.update_item(ALICE, other.product_id, 1)

        assert "Cart item not found" in exc_info.value.message


class TestRemoveItem:
    def test_removes_line(self, carts, make_product):
        aloe = make_product(name="Aloe Vera")
        rose = make_product(name="Rose Bush")
        carts.add_item(ALICE, aloe.product_id, 1)
        carts.add_item(ALICE, rose.product_id, 1)

        cart = carts.remove_item(ALICE, aloe.product_id)

        assert [line.product_id for line in cart.items] == [rose.product_id]

    def test_removing_absent_product_leaves_cart_unchanged(self, carts, make_product):
        product = make_product()
        before = carts.add_item(ALICE, product.product_id, 2)

        after = carts.remove_item(ALICE, 9999)

        assert after.items == before.items
        assert after.version == before.version

    def test_missing_cart_is_not_found(self, carts):
        with pytest.raises(NotFoundError):
            carts.remove_item(ALICE, 1)

    def test_cart_survives_removal_of_last_line(self, carts, make_product):
        product = make_product()
        created = carts.add_item(ALICE, product.product_id, 1)

        cart = carts.remove_item(ALICE, product.product_id)

        assert cart.cart_id == created.cart_id
        assert cart.is_empty


class TestVersionToken:
    def test_every_write_bumps_version(self, carts, make_product):
        product = make_product()

        first = carts.add_item(ALICE, product.product_id, 1)
        second = carts.update_item(ALICE, product.product_id, 3)

        assert second.version == first.version + 1

    def test_stale_version_is_a_conflict(self, carts, make_product):
        product = make_product()
        stale = carts.add_item(ALICE, product.product_id, 1)
        carts.add_item(ALICE, product.product_id, 1)

        with carts.cart_repo.transaction() as conn:
            with pytest.raises(ConflictError):
                carts._claim(conn, stale)
