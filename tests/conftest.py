import pytest
from sqlalchemy.engine import Engine

from storefront import create_app
from storefront.core.config import AppConfig, Config, DatabaseConfig, SecurityConfig
from storefront.core.dependencies import EXTENSION_KEY
from storefront.core.security import ROLE_ADMIN, Identity, TokenVerifier
from storefront.services import CartService, CatalogService, CategoryService, OrderService

ADMIN_ID = 1
ALICE_ID = 2
BOB_ID = 3


@pytest.fixture
def config(tmp_path):
    return Config(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'storefront.db'}"),
        security=SecurityConfig(secret_key="test-secret"),
        app=AppConfig(environment="test", log_level="WARNING"),
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config["TESTING"] = True
    yield app
    app.extensions[EXTENSION_KEY].get(Engine).dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def container(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def catalog(container) -> CatalogService:
    return container.get(CatalogService)


@pytest.fixture
def categories(container) -> CategoryService:
    return container.get(CategoryService)


@pytest.fixture
def carts(container) -> CartService:
    return container.get(CartService)


@pytest.fixture
def orders(container) -> OrderService:
    return container.get(OrderService)


@pytest.fixture
def auth_header(container):
    """Build an Authorization header for a user id, optionally as admin."""
    verifier = container.get(TokenVerifier)

    def _header(user_id: int, admin: bool = False):
        identity = Identity(user_id=user_id, role=ROLE_ADMIN) if admin else Identity(user_id=user_id)
        return {"Authorization": f"Bearer {verifier.sign(identity)}"}

    return _header


@pytest.fixture
def admin_headers(auth_header):
    return auth_header(ADMIN_ID, admin=True)


@pytest.fixture
def alice_headers(auth_header):
    return auth_header(ALICE_ID)


@pytest.fixture
def bob_headers(auth_header):
    return auth_header(BOB_ID)


@pytest.fixture
def category(categories):
    return categories.create_category(name="Indoor Plants", description="Plants that thrive indoors")


@pytest.fixture
def make_product(catalog, category):
    """Create a product in the default category."""

    def _make(name="Monstera Deliciosa", price_cents=2999, stock=20, **kwargs):
        return catalog.create_product(
            name=name,
            description=kwargs.pop("description", f"{name} description"),
            price_cents=price_cents,
            category_id=kwargs.pop("category_id", category.category_id),
            stock=stock,
            **kwargs,
        )

    return _make


@pytest.fixture
def shipping_address():
    return {
        "street": "123 Test St",
        "city": "Test City",
        "state": "TS",
        "country": "Test Country",
        "zip_code": "12345",
    }
