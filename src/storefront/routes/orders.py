import logging

from flask import Blueprint

from storefront.core.dependencies import get_service
from storefront.routes.utils import (
    admin_required, current_identity, load_body, login_required, success_response
)
from storefront.schemas.requests import PlaceOrderSchema, UpdateOrderStatusSchema
from storefront.schemas.responses import OrderResponse, dump, dump_many
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

orders_bp = Blueprint("orders", __name__)

_place_schema = PlaceOrderSchema()
_status_schema = UpdateOrderStatusSchema()


@orders_bp.route("", methods=["POST"])
@login_required
def place_order():
    """
    Turn the caller's cart into an order

    Body: {"shippingAddress": {...}, "paymentMethod": "..."}
    Stock is taken and the cart removed in the same transaction as the order insert.
    """
    data = load_body(_place_schema)
    order = get_service(OrderService).place_order(
        current_identity().user_id,
        shipping_address=data["shipping_address"],
        payment_method=data["payment_method"],
    )
    return success_response(dump(OrderResponse, order), "Order placed.", 201)


@orders_bp.route("", methods=["GET"])
@login_required
def list_my_orders():
    orders = get_service(OrderService).list_orders(current_identity().user_id)
    return success_response(dump_many(OrderResponse, orders))


@orders_bp.route("/<int:order_id>", methods=["GET"])
@login_required
def get_order(order_id: int):
    order = get_service(OrderService).get_order(order_id, current_identity())
    return success_response(dump(OrderResponse, order))


@orders_bp.route("/<int:order_id>", methods=["PUT"])
@admin_required
def update_order_status(order_id: int):
    """Admin-only; omitted, null or empty statuses are left as they are."""
    data = load_body(_status_schema)
    order = get_service(OrderService).update_status(
        order_id,
        order_status=data.get("order_status"),
        payment_status=data.get("payment_status"),
    )
    return success_response(dump(OrderResponse, order))
