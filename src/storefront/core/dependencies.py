from typing import TypeVar, Type, Dict, Any, Callable

from flask import current_app
from sqlalchemy.engine import Engine

from storefront.core.config import Config
from storefront.core.security import TokenVerifier

T = TypeVar('T')

EXTENSION_KEY = "storefront"


class DependencyContainer:
    """Per-application registry of the engine, repositories and services"""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        key = self._get_service_key(service_class)
        self._services[key] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        """Defer construction until first ``get``; the result is cached."""
        key = self._get_service_key(service_class)
        self._factories[key] = factory

    def get(self, service_class: Type[T]) -> T:
        key = self._get_service_key(service_class)

        if key in self._services:
            return self._services[key]

        if key in self._factories:
            instance = self._factories.pop(key)()
            self._services[key] = instance
            return instance

        raise ValueError(f"Service {service_class.__name__} not registered")

    def _get_service_key(self, service_class: Type[T]) -> str:
        return f"{service_class.__module__}.{service_class.__qualname__}"


def build_container(config: Config, engine: Engine) -> DependencyContainer:
    """Wire repositories and services around one engine."""
    # Imported here: services import core modules, not the other way round.
    from storefront.repositories import (
        CartRepository, CategoryRepository, OrderRepository, ProductRepository
    )
    from storefront.services import CartService, CatalogService, CategoryService, OrderService

    container = DependencyContainer()

    container.register_singleton(Config, config)
    container.register_singleton(Engine, engine)
    container.register_singleton(TokenVerifier, TokenVerifier(config.security))

    for repository_class in (ProductRepository, CategoryRepository, CartRepository, OrderRepository):
        container.register_singleton(repository_class, repository_class(engine))

    container.register_factory(CatalogService, lambda: CatalogService(
        container.get(ProductRepository),
        container.get(CategoryRepository),
        page_size=config.api.page_size,
    ))
    container.register_factory(CategoryService, lambda: CategoryService(
        container.get(CategoryRepository),
    ))
    container.register_factory(CartService, lambda: CartService(
        container.get(CartRepository),
        container.get(ProductRepository),
    ))
    container.register_factory(OrderService, lambda: OrderService(
        container.get(OrderRepository),
        container.get(CartRepository),
        container.get(ProductRepository),
    ))

    return container


def get_container() -> DependencyContainer:
    """Container bound to the active Flask application"""
    return current_app.extensions[EXTENSION_KEY]


def get_service(service_class: Type[T]) -> T:
    return get_container().get(service_class)
