import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class Category:
    """Product category"""
    category_id: int
    name: str
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class CategoryRef:
    """Category summary embedded in product payloads"""
    category_id: int
    name: str


@dataclass
class Product:
    """Represents a product in the catalog"""
    product_id: int
    name: str
    description: str
    price_cents: int
    stock: int
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    images: List[Dict[str, Any]] = field(default_factory=list)
    ratings: float = 0.0
    num_reviews: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def can_supply(self, quantity: int) -> bool:
        """Whether current stock covers ``quantity`` units"""
        return quantity <= self.stock


@dataclass
class ProductPage:
    """One page of a filtered product listing"""
    products: List[Product]
    page: int
    total: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0
