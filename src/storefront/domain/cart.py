from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CartItem:
    """Represents a line in a shopping cart"""
    product_id: int
    quantity: int
    price_cents: int  # Price at time of adding to cart
    product_name: Optional[str] = None
    product_stock: int = 0  # Live stock, loaded alongside the line
    images: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def subtotal_cents(self) -> int:
        """Calculate subtotal in cents"""
        return self.price_cents * self.quantity


@dataclass
class Cart:
    """
    Represents a user's shopping cart.

    cart_id is None for the placeholder returned to users who have never
    added anything; such a cart is not persisted.
    """
    cart_id: Optional[int]
    user_id: int
    version: int = 0
    items: List[CartItem] = field(default_factory=list)

    @classmethod
    def empty(cls, user_id: int) -> "Cart":
        return cls(cart_id=None, user_id=user_id)

    @property
    def total_items(self) -> int:
        """Number of distinct lines in cart"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def total_cents(self) -> int:
        """Total cart value in cents, from captured line prices"""
        return sum(item.subtotal_cents for item in self.items)

    @property
    def is_empty(self) -> bool:
        """Check if cart is empty"""
        return len(self.items) == 0

    def get_item(self, product_id: int) -> Optional[CartItem]:
        """Find cart line by product ID"""
        return next((item for item in self.items if item.product_id == product_id), None)
