"""Builders for the notifications emitted after each committed order change."""

from src.am_common.enums import OrderEventType, OrderStatus, UserRole
from src.am_inventory.domain.models import Product
from src.am_notify.domain.events import OrderEvent
from src.am_order.domain.models import Order


def new_order_event(order: Order, product: Product) -> OrderEvent:
    """Tell the seller a buyer has placed an order."""
    return OrderEvent(
        event_type=OrderEventType.NEW_ORDER,
        recipient_id=order.seller_id,
        recipient_role=UserRole.SELLER,
        order_id=order.id,
        payload={
            "buyer_id": order.buyer_id,
            "product_id": product.id,
            "product_name": product.name,
            "quantity": order.quantity,
            "unit": product.unit,
            "total_price_cents": order.total_price_cents,
            "status": order.status.value,
        },
    )


def status_updated_event(order: Order, old_status: OrderStatus) -> OrderEvent:
    """Tell the buyer the seller moved the order along."""
    return OrderEvent(
        event_type=OrderEventType.ORDER_STATUS_UPDATED,
        recipient_id=order.buyer_id,
        recipient_role=UserRole.BUYER,
        order_id=order.id,
        payload={
            "product_id": order.product_id,
            "old_status": old_status.value,
            "new_status": order.status.value,
            "total_price_cents": order.total_price_cents,
        },
    )


def cancelled_event(order: Order) -> OrderEvent:
    """Tell whichever party did not cancel."""
    if order.cancelled_by is None:
        raise ValueError(f"order {order.id} has no cancelling party")
    if order.cancelled_by == order.buyer_id:
        cancelled_by_role, recipient_role = UserRole.BUYER, UserRole.SELLER
    else:
        cancelled_by_role, recipient_role = UserRole.SELLER, UserRole.BUYER
    return OrderEvent(
        event_type=OrderEventType.ORDER_CANCELLED,
        recipient_id=order.counterparty_of(order.cancelled_by),
        recipient_role=recipient_role,
        order_id=order.id,
        payload={
            "cancelled_by": order.cancelled_by,
            "cancelled_by_role": cancelled_by_role.value,
            "reason": order.cancel_reason,
            "quantity_released": order.quantity,
        },
    )
