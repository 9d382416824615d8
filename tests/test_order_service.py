"""Service tests for OrderService.

Covers:
- place_order: totals from captured prices, stock decrement, cart removal
- place_order failures roll back every effect
- get_order access rules
- update_status partial overwrite
"""

import pytest

from storefront.core.exceptions import (
    ConflictError, EmptyCartError, InsufficientStockError, NotFoundError, UnauthorizedError
)
from storefront.core.security import ROLE_ADMIN, Identity

ALICE = 2
BOB = 3


class TestPlaceOrder:
    def test_places_order_from_cart(self, carts, orders, catalog, make_product, shipping_address):
        product = make_product(price_cents=2999, stock=20)
        carts.add_item(ALICE, product.product_id, 2)

        order = orders.place_order(ALICE, shipping_address, "COD")

        assert order.user_id == ALICE
        assert order.total_cents == 5998
        assert order.order_status == "Pending"
        assert order.payment_status == "Pending"
        assert order.payment_method == "COD"
        assert order.shipping_address == shipping_address
        assert [(i.product_id, i.name, i.quantity, i.price_cents) for i in order.items] == [
            (product.product_id, "Monstera Deliciosa", 2, 2999)
        ]
        assert catalog.get_product(product.product_id).stock == 18
        assert carts.get_cart(ALICE).cart_id is None

    def test_uses_price_captured_in_cart(self, carts, orders, catalog, make_product, shipping_address):
        product = make_product(price_cents=1000, stock=5)
        carts.add_item(ALICE, product.product_id, 2)
        catalog.update_product(product.product_id, {"price_cents": 5000})

        order = orders.place_order(ALICE, shipping_address, "Card")

        assert order.items[0].price_cents == 1000
        assert order.total_cents == 2000
        assert catalog.get_product(product.product_id).stock == 3
        assert carts.get_cart(ALICE).cart_id is None

    def test_multiple_lines_decrement_each_product(
        self, carts, orders, catalog, make_product, shipping_address
    ):
        aloe = make_product(name="Aloe Vera", price_cents=1999, stock=30)
        rose = make_product(name="Rose Bush", price_cents=3999, stock=15)
        carts.add_item(ALICE, aloe.product_id, 3)
        carts.add_item(ALICE, rose.product_id, 1)

        order = orders.place_order(ALICE, shipping_address, "COD")

        assert order.total_cents == 3 * 1999 + 3999
        assert catalog.get_product(aloe.product_id).stock == 27
        assert catalog.get_product(rose.product_id).stock == 14

    def test_empty_cart_is_rejected(self, orders, shipping_address):
        with pytest.raises(EmptyCartError) as exc_info:
            orders.place_order(ALICE, shipping_address, "COD")

        assert exc_info.value.message == "No items in cart"

    def test_cart_emptied_by_removal_is_rejected(self, carts, orders, make_product, shipping_address):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 1)
        carts.remove_item(ALICE, product.product_id)

        with pytest.raises(EmptyCartError):
            orders.place_order(ALICE, shipping_address, "COD")

    def test_line_above_stock_fails_without_side_effects(
        self, carts, orders, catalog, make_product, shipping_address
    ):
        aloe = make_product(name="Aloe Vera", stock=10)
        rose = make_product(name="Rose Bush", stock=3)
        carts.add_item(ALICE, aloe.product_id, 2)
        carts.add_item(ALICE, rose.product_id, 2)
        carts.add_item(ALICE, rose.product_id, 2)  # line now exceeds stock

        with pytest.raises(InsufficientStockError) as exc_info:
            orders.place_order(ALICE, shipping_address, "COD")

        assert exc_info.value.message == "Not enough stock for Rose Bush"
        assert catalog.get_product(aloe.product_id).stock == 10
        assert catalog.get_product(rose.product_id).stock == 3
        assert carts.get_cart(ALICE).total_quantity == 6
        assert orders.list_orders(ALICE) == []

    def test_stale_cart_version_rolls_back_stock(
        self, carts, orders, catalog, make_product, shipping_address, monkeypatch
    ):
        product = make_product(stock=5)
        carts.add_item(ALICE, product.product_id, 2)

        read_cart = orders.cart_repo.get_by_user

        def stale_read(conn, user_id):
            cart = read_cart(conn, user_id)
            cart.version -= 1
            return cart

        monkeypatch.setattr(orders.cart_repo, "get_by_user", stale_read)

        with pytest.raises(ConflictError):
            orders.place_order(ALICE, shipping_address, "COD")

        monkeypatch.undo()
        assert catalog.get_product(product.product_id).stock == 5
        assert orders.list_orders(ALICE) == []
        assert carts.get_cart(ALICE).total_quantity == 2

    def test_stock_never_goes_negative_across_users(
        self, carts, orders, catalog, make_product, shipping_address
    ):
        product = make_product(stock=3)
        carts.add_item(ALICE, product.product_id, 2)
        carts.add_item(BOB, product.product_id, 2)

        orders.place_order(ALICE, shipping_address, "COD")
        with pytest.raises(InsufficientStockError):
            orders.place_order(BOB, shipping_address, "COD")

        assert catalog.get_product(product.product_id).stock == 1


class TestListAndGetOrders:
    def test_list_returns_only_own_orders_newest_first(
        self, carts, orders, make_product, shipping_address
    ):
        product = make_product(stock=10)
        carts.add_item(ALICE, product.product_id, 1)
        first = orders.place_order(ALICE, shipping_address, "COD")
        carts.add_item(ALICE, product.product_id, 1)
        second = orders.place_order(ALICE, shipping_address, "COD")
        carts.add_item(BOB, product.product_id, 1)
        orders.place_order(BOB, shipping_address, "COD")

        listed = orders.list_orders(ALICE)

        assert [o.order_id for o in listed] == [second.order_id, first.order_id]

    def test_owner_and_admin_can_read_order(self, carts, orders, make_product, shipping_address):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 1)
        placed = orders.place_order(ALICE, shipping_address, "COD")

        assert orders.get_order(placed.order_id, Identity(ALICE)).order_id == placed.order_id
        assert orders.get_order(placed.order_id, Identity(1, ROLE_ADMIN)).order_id == placed.order_id

    def test_other_user_is_unauthorized(self, carts, orders, make_product, shipping_address):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 1)
        placed = orders.place_order(ALICE, shipping_address, "COD")

        with pytest.raises(UnauthorizedError):
            orders.get_order(placed.order_id, Identity(BOB))

    def test_unknown_order_is_not_found(self, orders):
        with pytest.raises(NotFoundError):
            orders.get_order(9999, Identity(ALICE))


class TestUpdateStatus:
    @pytest.fixture
    def order(self, carts, orders, make_product, shipping_address):
        product = make_product()
        carts.add_item(ALICE, product.product_id, 1)
        return orders.place_order(ALICE, shipping_address, "COD")

    def test_updates_both_statuses(self, orders, order):
        updated = orders.update_status(order.order_id, order_status="Shipped", payment_status="Paid")

        assert updated.order_status == "Shipped"
        assert updated.payment_status == "Paid"

    def test_absent_or_empty_values_leave_status_unchanged(self, orders, order):
        orders.update_status(order.order_id, order_status="Processing")

        updated = orders.update_status(order.order_id, order_status="", payment_status="Paid")

        assert updated.order_status == "Processing"
        assert updated.payment_status == "Paid"

    def test_any_transition_is_allowed(self, orders, order):
        orders.update_status(order.order_id, order_status="Delivered")

        updated = orders.update_status(order.order_id, order_status="Pending")

        assert updated.order_status == "Pending"

    def test_unknown_order_is_not_found(self, orders):
        with pytest.raises(NotFoundError):
            orders.update_status(9999, order_status="Shipped")
