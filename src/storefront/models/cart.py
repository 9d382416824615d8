from sqlalchemy import CheckConstraint, Column, DateTime, Integer, UniqueConstraint, func
from sqlalchemy import ForeignKey

from storefront.db import Base, IdType


class Cart(Base):
    """
    A shopping cart belonging to a user.

    The UNIQUE constraint on user_id enforces one cart per user. version is
    bumped on every write; a writer that read an older version loses.

    The cart is deleted outright when an order is placed from it, and the
    cascade on cart_items takes the lines with it.
    """

    __tablename__ = "carts"

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, nullable=False, unique=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Cart id={self.id} user_id={self.user_id} version={self.version}>"


class CartItem(Base):
    """
    A single product + quantity pair inside a cart.

    price_cents is captured when the line is first added and is not
    refreshed by later adds of the same product.
    """

    __tablename__ = "cart_items"

    id = Column(IdType, primary_key=True, autoincrement=True)
    cart_id = Column(
        IdType, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(
        IdType, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    quantity = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity"),
        UniqueConstraint("cart_id", "product_id", name="uq_cart_item_product"),
    )

    def __repr__(self) -> str:
        return (
            f"<CartItem id={self.id} product_id={self.product_id} "
            f"qty={self.quantity}>"
        )
