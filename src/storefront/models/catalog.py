from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Float, Integer, Text, func

from storefront.db import Base, IdType


class Category(Base):
    """
    Grouping for products (e.g. Indoor Plants, Medicinal Plants).

    Deleting a category does not touch its products; they keep a dangling
    category_id, which is why products.category_id has no foreign key.
    """

    __tablename__ = "categories"

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"


class Product(Base):
    """
    A sellable product.

    price_cents stores the price as an integer number of cents to avoid
    floating-point rounding errors. $29.99 -> 2999.

    images is a JSON list of {"public_id", "url"} references returned by the
    external image host; binaries never pass through this service.
    """

    __tablename__ = "products"

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price_cents = Column(Integer, nullable=False)
    category_id = Column(IdType, nullable=True, index=True)
    stock = Column(Integer, nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)
    ratings = Column(Float, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Holds for every write, not only the conditional decrement.
    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_product_price"),
        CheckConstraint("stock >= 0", name="ck_product_stock"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"
