"""Inventory domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Product:
    id: str
    seller_id: str
    name: str
    category: str
    price_cents: int          # > 0
    unit: str                 # UnitOfMeasure value
    available_quantity: int   # >= 0
    in_stock: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
