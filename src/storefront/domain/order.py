from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

DEFAULT_ORDER_STATUS = "Pending"
DEFAULT_PAYMENT_STATUS = "Pending"


@dataclass
class OrderItem:
    """
    Immutable line snapshot within an order.

    name and price_cents are copied at placement time and are not linked
    to the live product.
    """
    product_id: int
    name: str
    quantity: int
    price_cents: int

    @property
    def subtotal_cents(self) -> int:
        return self.price_cents * self.quantity


@dataclass
class Order:
    """Represents a placed order"""
    order_id: int
    user_id: int
    total_cents: int
    payment_method: str
    shipping_address: Dict[str, Any] = field(default_factory=dict)
    order_status: str = DEFAULT_ORDER_STATUS
    payment_status: str = DEFAULT_PAYMENT_STATUS
    items: List[OrderItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id
