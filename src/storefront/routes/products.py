import logging

from flask import Blueprint, request

from storefront.core.dependencies import get_service
from storefront.routes.utils import admin_required, load_body, parse_int, success_response
from storefront.schemas.requests import ProductSchema
from storefront.schemas.responses import ProductPageResponse, ProductResponse, dump
from storefront.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

products_bp = Blueprint("products", __name__)

_product_schema = ProductSchema()


@products_bp.route("", methods=["GET"])
def list_products():
    """List products with keyword/category filtering and fixed-size pages."""
    page = parse_int(request.args.get("page"), default=1, field_name="page")
    category_id = parse_int(request.args.get("category"), default=None, min_val=1, field_name="category")
    keyword = request.args.get("keyword", "")

    result = get_service(CatalogService).list_products(page=page, keyword=keyword, category_id=category_id)
    return success_response(dump(ProductPageResponse, result))


@products_bp.route("/<int:product_id>", methods=["GET"])
def get_product(product_id: int):
    product = get_service(CatalogService).get_product(product_id)
    return success_response(dump(ProductResponse, product))


@products_bp.route("", methods=["POST"])
@admin_required
def create_product():
    data = load_body(_product_schema)
    product = get_service(CatalogService).create_product(**data)
    return success_response(dump(ProductResponse, product), "Product created.", 201)


@products_bp.route("/<int:product_id>", methods=["PUT"])
@admin_required
def update_product(product_id: int):
    """Partial update: only fields present in the body change."""
    changes = load_body(_product_schema, partial=True)
    product = get_service(CatalogService).update_product(product_id, changes)
    return success_response(dump(ProductResponse, product))


@products_bp.route("/<int:product_id>", methods=["DELETE"])
@admin_required
def delete_product(product_id: int):
    get_service(CatalogService).delete_product(product_id)
    return success_response(None, "Product removed")
