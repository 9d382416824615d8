"""
Seed script -- resets the catalog to a small plant-shop data set.

Run with:
    python -m storefront.seed

Every run wipes orders, carts, products and categories first, so the
result is always the same. Also prints bearer credentials for an admin
(user 1) and a customer (user 2) for trying the API locally.
"""

from sqlalchemy import text

from storefront.core.config import Config
from storefront.core.security import ROLE_ADMIN, ROLE_CUSTOMER, Identity, TokenVerifier
from storefront.db import create_db_engine, init_schema
from storefront.repositories import CategoryRepository, ProductRepository

CATEGORIES = [
    ("Indoor Plants", "Plants that thrive indoors"),
    ("Outdoor Plants", "Garden and patio plants"),
    ("Succulents", "Low-maintenance water-storing plants"),
    ("Flowering Plants", "Plants grown for their blooms"),
]

PRODUCTS = [
    {
        "name": "Monstera Deliciosa",
        "description": "Split-leaf philodendron, easy to care for.",
        "price_cents": 2999,
        "category": "Indoor Plants",
        "stock": 20,
        "images": [{"public_id": "monstera_1", "url": "https://example.com/monstera1.jpg"}],
    },
    {
        "name": "Rose Bush",
        "description": "Hardy red rose bush for sunny borders.",
        "price_cents": 3999,
        "category": "Flowering Plants",
        "stock": 15,
        "images": [{"public_id": "rose_1", "url": "https://example.com/rose1.jpg"}],
    },
    {
        "name": "Aloe Vera",
        "description": "Medicinal succulent that needs little water.",
        "price_cents": 1999,
        "category": "Succulents",
        "stock": 30,
        "images": [{"public_id": "aloe_1", "url": "https://example.com/aloe1.jpg"}],
    },
]


def seed(config: Config) -> None:
    engine = create_db_engine(config.database)
    init_schema(engine)

    categories = CategoryRepository(engine)
    products = ProductRepository(engine)

    with categories.transaction() as conn:
        for table in ("order_items", "orders", "cart_items", "carts", "products", "categories"):
            conn.execute(text(f"DELETE FROM {table}"))
        print("  [+] Existing data removed")

        category_ids = {}
        for name, description in CATEGORIES:
            category_ids[name] = categories.create(conn, name=name, description=description)
        print(f"  [+] {len(category_ids)} categories seeded")

        for p in PRODUCTS:
            products.create(
                conn,
                name=p["name"],
                description=p["description"],
                price_cents=p["price_cents"],
                category_id=category_ids[p["category"]],
                stock=p["stock"],
                images=p["images"],
            )
            print(f"  [+] Product: {p['name']}")

    verifier = TokenVerifier(config.security)
    print("\nDevelopment credentials (Authorization: Bearer <token>):")
    print(f"  admin    (user 1): {verifier.sign(Identity(user_id=1, role=ROLE_ADMIN))}")
    print(f"  customer (user 2): {verifier.sign(Identity(user_id=2, role=ROLE_CUSTOMER))}")


if __name__ == "__main__":
    print("Seeding database...")
    seed(Config.from_env())
    print("Done.")
