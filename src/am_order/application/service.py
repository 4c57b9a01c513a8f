"""OrderLifecycleService — creation, status advancement and cancellation.

Each mutating command runs the same shape:

    authorize → validate → (stock mutation + order write) → commit → notify

The stock mutation and the order write share one database transaction, so a
failure anywhere before commit rolls back the reservation/release together
with the order row. Notifications are handed to the dispatcher only after
commit and can never turn a committed change into an error.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.datetime_utils import utc_now
from src.am_common.enums import OrderStatus
from src.am_common.errors import (
    ForbiddenError,
    InvalidOrderRequestError,
    InvalidStatusTransitionError,
    OrderNotCancellableError,
    OrderNotFoundError,
)
from src.am_common.id_generator import generate_id
from src.am_gateway.auth.dependencies import Principal
from src.am_inventory.domain.repository import StockLedgerProtocol
from src.am_inventory.infrastructure.stock_ledger import StockLedger
from src.am_notify.domain.dispatcher import NotificationDispatcherProtocol
from src.am_notify.domain.events import OrderEvent
from src.am_notify.infrastructure.redis_dispatcher import get_dispatcher
from src.am_order.application.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    UpdateStatusRequest,
)
from src.am_order.domain import state_machine
from src.am_order.domain.events import cancelled_event, new_order_event, status_updated_event
from src.am_order.domain.models import Order, ProductSummary
from src.am_order.domain.repository import OrderRepositoryProtocol
from src.am_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderLifecycleService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        ledger: StockLedgerProtocol | None = None,
        dispatcher: NotificationDispatcherProtocol | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._ledger: StockLedgerProtocol = ledger or StockLedger()
        self._dispatcher = dispatcher

    def _notify(self, event: OrderEvent) -> None:
        dispatcher = self._dispatcher or get_dispatcher()
        try:
            dispatcher.publish(event)
        except Exception:
            logger.exception(
                "Notification %s for order %s not dispatched",
                event.event_type.value,
                event.order_id,
            )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, principal: Principal, req: CreateOrderRequest
    ) -> OrderResponse:
        if not principal.is_buyer:
            raise ForbiddenError("Only buyers can create orders")
        if not req.product_id or req.quantity is None or not req.delivery_address:
            raise InvalidOrderRequestError(
                "Please provide productId, quantity, and deliveryAddress"
            )
        if req.quantity <= 0:
            raise InvalidOrderRequestError("Quantity must be at least 1")

        try:
            product = await self._ledger.reserve(db, req.product_id, req.quantity)
            now = utc_now()
            order = Order(
                id=generate_id(),
                buyer_id=principal.user_id,
                seller_id=product.seller_id,
                product_id=product.id,
                quantity=req.quantity,
                unit_price_cents=product.price_cents,
                total_price_cents=req.quantity * product.price_cents,
                delivery_address=req.delivery_address,
                payment_method=req.payment_method.value,
                notes=req.notes,
                status=OrderStatus.PENDING,
                created_at=now,
                updated_at=now,
                product=ProductSummary(
                    name=product.name, unit=product.unit, price_cents=product.price_cents
                ),
            )
            await self._repo.save(order, db)
            await db.commit()
        except Exception:
            # Undoes the reservation if it was taken.
            await db.rollback()
            raise

        logger.info(
            "Order %s created: buyer=%s product=%s qty=%d total=%d",
            order.id,
            order.buyer_id,
            order.product_id,
            order.quantity,
            order.total_price_cents,
        )
        self._notify(new_order_event(order, product))
        return OrderResponse.from_domain(order)

    async def advance_status(
        self,
        db: AsyncSession,
        principal: Principal,
        order_id: str,
        req: UpdateStatusRequest,
    ) -> OrderResponse:
        if not req.status:
            raise InvalidOrderRequestError("Please provide status")

        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if principal.user_id != order.seller_id:
            raise ForbiddenError("Only the seller can update order status")

        requested = state_machine.parse_status(req.status)
        if requested is None:
            raise InvalidStatusTransitionError(order.status.value, req.status)
        state_machine.ensure_can_advance(order.status, requested)

        old_status = order.status
        state_machine.apply_status(order, requested, utc_now())
        try:
            if not await self._repo.update_status(order, old_status, db):
                raise InvalidStatusTransitionError(old_status.value, requested.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s status %s -> %s", order.id, old_status.value, order.status.value)
        self._notify(status_updated_event(order, old_status))
        return OrderResponse.from_domain(order)

    async def cancel_order(
        self,
        db: AsyncSession,
        principal: Principal,
        order_id: str,
        req: CancelOrderRequest,
    ) -> OrderResponse:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not order.is_participant(principal.user_id):
            raise ForbiddenError("You are not authorized to cancel this order")
        state_machine.ensure_can_cancel(order)

        old_status = order.status
        order.cancelled_by = principal.user_id
        order.cancel_reason = req.reason
        state_machine.apply_status(order, OrderStatus.CANCELLED, utc_now())
        try:
            # Only the transaction that wins the status CAS credits stock back.
            if not await self._repo.update_status(order, old_status, db):
                current = await self._repo.get_by_id(order_id, db)
                status = current.status.value if current else old_status.value
                raise OrderNotCancellableError(order_id, status)
            await self._ledger.release(db, order.product_id, order.quantity)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s cancelled by %s from %s; released %d of product %s",
            order.id,
            principal.user_id,
            old_status.value,
            order.quantity,
            order.product_id,
        )
        self._notify(cancelled_event(order))
        return OrderResponse.from_domain(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_order(
        self, db: AsyncSession, principal: Principal, order_id: str
    ) -> OrderResponse:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not order.is_participant(principal.user_id):
            raise ForbiddenError("You are not authorized to view this order")
        return OrderResponse.from_domain(order)

    async def list_buyer_orders(
        self,
        db: AsyncSession,
        principal: Principal,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        if not principal.is_buyer:
            raise ForbiddenError("Only buyers can access this route")
        # Fetch limit+1 to detect has_more without COUNT(*)
        orders = await self._repo.list_by_buyer(
            principal.user_id, status, limit + 1, cursor, db
        )
        return _build_page(orders, limit)

    async def list_seller_orders(
        self,
        db: AsyncSession,
        principal: Principal,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        if not principal.is_seller:
            raise ForbiddenError("Only sellers can access this route")
        orders = await self._repo.list_by_seller(
            principal.user_id, status, limit + 1, cursor, db
        )
        return _build_page(orders, limit)


def _build_page(orders: list[Order], limit: int) -> OrderListResponse:
    has_more = len(orders) > limit
    page = orders[:limit]
    next_cursor = page[-1].id if has_more and page else None
    return OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in page],
        results=len(page),
        next_cursor=next_cursor,
        has_more=has_more,
    )
