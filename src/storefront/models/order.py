from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Integer, Text, func
from sqlalchemy import ForeignKey

from storefront.db import Base, IdType


class Order(Base):
    """
    A placed order.

    order_status and payment_status are free text set by admins; no
    transition rules are enforced.

    total_cents is copied from the cart at placement time and never
    recomputed, so later price changes do not alter the charged amount.
    """

    __tablename__ = "orders"

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, nullable=False, index=True)
    shipping_address = Column(JSON, nullable=False, default=dict)
    payment_method = Column(Text, nullable=False)
    total_cents = Column(Integer, nullable=False)
    order_status = Column(Text, nullable=False, default="Pending")
    payment_status = Column(Text, nullable=False, default="Pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="ck_order_total"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order id={self.id} status={self.order_status!r} "
            f"total_cents={self.total_cents}>"
        )


class OrderItem(Base):
    """
    A line snapshot within an order.

    name and price_cents are copied from the product and cart line; there
    is no FK to products, so deleting a product leaves history intact.
    """

    __tablename__ = "order_items"

    id = Column(IdType, primary_key=True, autoincrement=True)
    order_id = Column(
        IdType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(IdType, nullable=False)
    name = Column(Text, nullable=False)
    price_cents = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_item_price"),
        CheckConstraint("quantity > 0", name="ck_item_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"<OrderItem id={self.id} product_id={self.product_id} "
            f"qty={self.quantity}>"
        )
