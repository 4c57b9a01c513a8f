"""Order status state machine.

    pending → confirmed → processing → shipped → delivered
       └──────────┴────────────┴───────────┴──→ cancelled

Advancing moves exactly one step along the main line. Cancellation is
allowed from every non-terminal status. ``delivered`` and ``cancelled`` are
terminal: their rows in the table are empty.
"""

from datetime import datetime

from src.am_common.enums import OrderStatus
from src.am_common.errors import InvalidStatusTransitionError, OrderNotCancellableError
from src.am_order.domain.models import Order

_S = OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    _S.PENDING: frozenset({_S.CONFIRMED, _S.CANCELLED}),
    _S.CONFIRMED: frozenset({_S.PROCESSING, _S.CANCELLED}),
    _S.PROCESSING: frozenset({_S.SHIPPED, _S.CANCELLED}),
    _S.SHIPPED: frozenset({_S.DELIVERED, _S.CANCELLED}),
    _S.DELIVERED: frozenset(),
    _S.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


def can_advance(current: OrderStatus, requested: OrderStatus) -> bool:
    """True only for the single fixed successor of ``current``."""
    return requested != _S.CANCELLED and requested in TRANSITIONS[current]


def can_cancel(current: OrderStatus) -> bool:
    return _S.CANCELLED in TRANSITIONS[current]


def parse_status(value: str) -> OrderStatus | None:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def ensure_can_advance(current: OrderStatus, requested: OrderStatus) -> None:
    if not can_advance(current, requested):
        raise InvalidStatusTransitionError(current.value, requested.value)


def ensure_can_cancel(order: Order) -> None:
    if not can_cancel(order.status):
        raise OrderNotCancellableError(order.id, order.status.value)


def apply_status(order: Order, new_status: OrderStatus, now: datetime) -> None:
    """Move ``order`` to ``new_status`` in memory.

    Callers check legality first. Entering ``delivered`` stamps delivered_at
    once; it is never overwritten.
    """
    order.status = new_status
    if new_status == _S.DELIVERED and order.delivered_at is None:
        order.delivered_at = now
    order.updated_at = now
