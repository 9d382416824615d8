from flask import Blueprint

from storefront.core.dependencies import get_service
from storefront.routes.utils import admin_required, load_body, success_response
from storefront.schemas.requests import CategorySchema
from storefront.schemas.responses import CategoryResponse, dump, dump_many
from storefront.services.catalog_service import CategoryService

categories_bp = Blueprint("categories", __name__)

_category_schema = CategorySchema()


@categories_bp.route("", methods=["GET"])
def list_categories():
    categories = get_service(CategoryService).list_categories()
    return success_response(dump_many(CategoryResponse, categories))


@categories_bp.route("/<int:category_id>", methods=["GET"])
def get_category(category_id: int):
    category = get_service(CategoryService).get_category(category_id)
    return success_response(dump(CategoryResponse, category))


@categories_bp.route("", methods=["POST"])
@admin_required
def create_category():
    data = load_body(_category_schema)
    category = get_service(CategoryService).create_category(**data)
    return success_response(dump(CategoryResponse, category), "Category created.", 201)


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id: int):
    changes = load_body(_category_schema, partial=True)
    category = get_service(CategoryService).update_category(category_id, changes)
    return success_response(dump(CategoryResponse, category))


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id: int):
    get_service(CategoryService).delete_category(category_id)
    return success_response(None, "Category removed")
