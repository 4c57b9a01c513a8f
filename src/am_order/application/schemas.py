# src/am_order/application/schemas.py
"""Request/response schemas for the order endpoints.

Required request fields are declared Optional on purpose: missing values are
rejected by the lifecycle service with a 400 InvalidOrderRequestError after
the role check, not by FastAPI's 422 body validation.
"""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.am_common.datetime_utils import age_in_days
from src.am_common.enums import PaymentMethod
from src.am_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    product_id: str | None = None
    quantity: int | None = None
    delivery_address: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = Field(None, max_length=500)

    @field_validator("delivery_address", "notes")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class UpdateStatusRequest(BaseModel):
    status: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductSummaryResponse(BaseModel):
    name: str
    unit: str
    price_cents: int


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    seller_id: str
    product_id: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    delivery_address: str
    payment_method: str
    notes: str | None = None
    status: str
    cancelled_by: str | None = None
    cancel_reason: str | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    order_age_days: int = 0
    product: ProductSummaryResponse | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            product_id=order.product_id,
            quantity=order.quantity,
            unit_price_cents=order.unit_price_cents,
            total_price_cents=order.total_price_cents,
            delivery_address=order.delivery_address,
            payment_method=order.payment_method,
            notes=order.notes,
            status=order.status.value,
            cancelled_by=order.cancelled_by,
            cancel_reason=order.cancel_reason,
            delivered_at=order.delivered_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
            order_age_days=age_in_days(order.created_at),
            product=(
                ProductSummaryResponse(
                    name=order.product.name,
                    unit=order.product.unit,
                    price_cents=order.product.price_cents,
                )
                if order.product
                else None
            ),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    results: int
    next_cursor: str | None
    has_more: bool
