import logging

from flask import Blueprint

from storefront.core.dependencies import get_service
from storefront.routes.utils import current_identity, load_body, login_required, success_response
from storefront.schemas.requests import AddCartItemSchema, UpdateCartItemSchema
from storefront.schemas.responses import CartResponse, dump
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()


@cart_bp.route("", methods=["GET"])
@login_required
def get_my_cart():
    """Return the current user's cart, or an empty placeholder if there is none."""
    cart = get_service(CartService).get_cart(current_identity().user_id)
    return success_response(dump(CartResponse, cart))


@cart_bp.route("", methods=["POST"])
@login_required
def add_cart_item():
    """Add a product to the cart, or increment its quantity if already present."""
    data = load_body(_add_schema)
    cart = get_service(CartService).add_item(
        current_identity().user_id, data["product_id"], data["quantity"]
    )
    return success_response(dump(CartResponse, cart), "Item added to cart.", 201)


@cart_bp.route("/<int:product_id>", methods=["PUT"])
@login_required
def update_cart_item(product_id: int):
    """Set the quantity of a product already in the cart."""
    data = load_body(_update_schema)
    cart = get_service(CartService).update_item(current_identity().user_id, product_id, data["quantity"])
    return success_response(dump(CartResponse, cart), "Cart item updated.")


@cart_bp.route("/<int:product_id>", methods=["DELETE"])
@login_required
def delete_cart_item(product_id: int):
    """Remove a product from the cart; absent products are ignored."""
    cart = get_service(CartService).remove_item(current_identity().user_id, product_id)
    return success_response(dump(CartResponse, cart))

