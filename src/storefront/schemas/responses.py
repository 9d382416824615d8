from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResponseModel(BaseModel):
    """Base for API payloads built straight from domain objects"""
    model_config = ConfigDict(from_attributes=True)


class CategoryRefResponse(ResponseModel):
    category_id: int
    name: str


class CategoryResponse(ResponseModel):
    category_id: int = Field(description="Unique category identifier")
    name: str
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductResponse(ResponseModel):
    """Product in API responses"""
    product_id: int = Field(description="Unique product identifier")
    name: str
    description: str
    price_cents: int = Field(ge=0, description="Current unit price in cents")
    stock: int = Field(ge=0, description="Units available")
    in_stock: bool
    category_id: Optional[int] = None
    category: Optional[CategoryRefResponse] = None
    images: List[Dict[str, Any]] = Field(default_factory=list, description="Image references from the image host")
    ratings: float = 0.0
    num_reviews: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductPageResponse(ResponseModel):
    products: List[ProductResponse]
    page: int = Field(ge=1)
    pages: int = Field(ge=0, description="Total number of pages")
    total: int = Field(ge=0, description="Total number of matching products")


class CartItemResponse(ResponseModel):
    """Cart line in API responses"""
    product_id: int
    product_name: Optional[str] = None
    quantity: int = Field(ge=1)
    price_cents: int = Field(description="Price when added to cart")
    subtotal_cents: int
    images: List[Dict[str, Any]] = Field(default_factory=list)


class CartResponse(ResponseModel):
    """
    Complete cart information

    cart_id is null for a user who has no cart yet.
    """
    cart_id: Optional[int] = None
    user_id: int
    items: List[CartItemResponse]
    total_items: int = Field(ge=0, description="Number of distinct lines")
    total_quantity: int = Field(ge=0, description="Total quantity of all lines")
    total_cents: int = Field(ge=0, description="Sum of captured line prices")
    is_empty: bool

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "cart_id": 7,
                "user_id": 42,
                "items": [
                    {
                        "product_id": 3,
                        "product_name": "Monstera Deliciosa",
                        "quantity": 2,
                        "price_cents": 2999,
                        "subtotal_cents": 5998,
                        "images": [{"public_id": "monstera_1", "url": "https://example.com/monstera1.jpg"}],
                    }
                ],
                "total_items": 1,
                "total_quantity": 2,
                "total_cents": 5998,
                "is_empty": False,
            }
        },
    )


class OrderItemResponse(ResponseModel):
    product_id: int
    name: str
    quantity: int
    price_cents: int
    subtotal_cents: int


class OrderResponse(ResponseModel):
    """Placed order in API responses"""
    order_id: int
    user_id: int
    items: List[OrderItemResponse]
    shipping_address: Dict[str, Any]
    payment_method: str
    total_cents: int
    order_status: str
    payment_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "order_id": 101,
                "user_id": 42,
                "items": [
                    {"product_id": 3, "name": "Monstera Deliciosa", "quantity": 2,
                     "price_cents": 2999, "subtotal_cents": 5998}
                ],
                "shipping_address": {"street": "123 Test St", "city": "Test City", "state": "TS",
                                     "country": "Test Country", "zip_code": "12345"},
                "payment_method": "COD",
                "total_cents": 5998,
                "order_status": "Pending",
                "payment_status": "Pending",
                "created_at": "2026-01-03T10:30:00Z",
                "updated_at": "2026-01-03T10:30:00Z",
            }
        },
    )


def dump(model_cls, obj) -> Dict[str, Any]:
    """Validate a domain object against a response model and return JSON-ready data."""
    return model_cls.model_validate(obj).model_dump(mode="json")


def dump_many(model_cls, objs) -> List[Dict[str, Any]]:
    return [dump(model_cls, obj) for obj in objs]
