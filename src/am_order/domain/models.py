"""Order domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.am_common.enums import OrderStatus


@dataclass(frozen=True)
class ProductSummary:
    """Current catalogue view of the ordered product; not part of the snapshot."""

    name: str
    unit: str
    price_cents: int


@dataclass
class Order:
    id: str
    buyer_id: str
    seller_id: str  # product owner at creation time
    product_id: str
    # Snapshot — immutable after creation
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    delivery_address: str
    payment_method: str = "cash"
    notes: str | None = None
    # Lifecycle
    status: OrderStatus = OrderStatus.PENDING
    cancelled_by: str | None = None
    cancel_reason: str | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Read-side only, joined from products; None once the product is deleted
    product: ProductSummary | None = None

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def counterparty_of(self, user_id: str) -> str:
        """The buyer for a seller's action, the seller for a buyer's."""
        return self.seller_id if user_id == self.buyer_id else self.buyer_id
