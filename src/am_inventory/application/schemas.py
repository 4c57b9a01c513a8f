# src/am_inventory/application/schemas.py
from datetime import datetime

from pydantic import BaseModel

from src.am_common.enums import UnitOfMeasure
from src.am_inventory.domain.models import Product


class ProductResponse(BaseModel):
    id: str
    seller_id: str
    name: str
    category: str
    price_cents: int
    unit: UnitOfMeasure
    available_quantity: int
    in_stock: bool
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            seller_id=product.seller_id,
            name=product.name,
            category=product.category,
            price_cents=product.price_cents,
            unit=UnitOfMeasure(product.unit),
            available_quantity=product.available_quantity,
            in_stock=product.in_stock,
            updated_at=product.updated_at,
        )
