from marshmallow import Schema, fields, validate, pre_load


class _StripStringsMixin:
    """Trim surrounding whitespace from every top-level string value."""

    @pre_load
    def strip_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return {key: value.strip() if isinstance(value, str) else value for key, value in data.items()}


class AddCartItemSchema(Schema):
    product_id = fields.Int(required=True, strict=True, data_key="productId", validate=validate.Range(min=1))
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=1))


class UpdateCartItemSchema(Schema):
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=1))


class ShippingAddressSchema(_StripStringsMixin, Schema):
    street = fields.Str(required=True, validate=validate.Length(min=1))
    city = fields.Str(required=True, validate=validate.Length(min=1))
    state = fields.Str(load_default=None)
    country = fields.Str(required=True, validate=validate.Length(min=1))
    zip_code = fields.Str(data_key="zipCode", load_default=None)


class PlaceOrderSchema(_StripStringsMixin, Schema):
    shipping_address = fields.Nested(ShippingAddressSchema, required=True, data_key="shippingAddress")
    payment_method = fields.Str(required=True, data_key="paymentMethod", validate=validate.Length(min=1, max=50))


class UpdateOrderStatusSchema(_StripStringsMixin, Schema):
    """Both fields optional; null or "" means leave unchanged."""
    order_status = fields.Str(data_key="orderStatus", allow_none=True, load_default=None,
                              validate=validate.Length(max=50))
    payment_status = fields.Str(data_key="paymentStatus", allow_none=True, load_default=None,
                                validate=validate.Length(max=50))


class ImageRefSchema(Schema):
    public_id = fields.Str(required=True)
    url = fields.Url(required=True)


class ProductSchema(_StripStringsMixin, Schema):
    """
    Product create body; loaded with partial=True for updates so that only
    keys present in the request reach the repository.
    """
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=2000))
    price_cents = fields.Int(required=True, strict=True, data_key="priceCents", validate=validate.Range(min=0))
    category_id = fields.Int(required=True, strict=True, data_key="category", validate=validate.Range(min=1))
    stock = fields.Int(strict=True, load_default=0, validate=validate.Range(min=0))
    images = fields.List(fields.Nested(ImageRefSchema), load_default=list,
                         validate=validate.Length(max=5))


class CategorySchema(_StripStringsMixin, Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=1000))
