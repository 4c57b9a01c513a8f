# src/am_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.enums import OrderStatus
from src.am_order.domain.models import Order, ProductSummary

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, buyer_id, seller_id, product_id,
        quantity, unit_price_cents, total_price_cents,
        delivery_address, payment_method, notes, status,
        created_at, updated_at)
    VALUES (:id, :buyer_id, :seller_id, :product_id,
        :quantity, :unit_price_cents, :total_price_cents,
        :delivery_address, :payment_method, :notes, :status,
        :created_at, :updated_at)
""")

# Compare-and-set on the previous status: a concurrent transition that got
# there first leaves this UPDATE with 0 rows. Snapshot columns are never
# written after INSERT, and delivered_at is only ever filled once.
_UPDATE_STATUS_SQL = text("""
    UPDATE orders
    SET status = :status,
        cancelled_by = :cancelled_by,
        cancel_reason = :cancel_reason,
        delivered_at = COALESCE(delivered_at, :delivered_at),
        updated_at = NOW()
    WHERE id = :id AND status = :expected_status
    RETURNING id
""")

_SELECT_COLUMNS = """
    o.id, o.buyer_id, o.seller_id, o.product_id,
    o.quantity, o.unit_price_cents, o.total_price_cents,
    o.delivery_address, o.payment_method, o.notes, o.status,
    o.cancelled_by, o.cancel_reason, o.delivered_at, o.created_at, o.updated_at,
    p.name AS product_name, p.unit AS product_unit, p.price_cents AS product_price_cents
"""

# LEFT JOIN: orders outlive the products they reference.
_FROM_ORDERS = "FROM orders o LEFT JOIN products p ON p.id = o.product_id"

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    {_FROM_ORDERS}
    WHERE o.id = :id
""")

_LIST_BY_BUYER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    {_FROM_ORDERS}
    WHERE o.buyer_id = :party_id
      AND (CAST(:status AS TEXT) IS NULL OR o.status = CAST(:status AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR o.id < CAST(:cursor_id AS TEXT))
    ORDER BY o.id DESC
    LIMIT :limit
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    {_FROM_ORDERS}
    WHERE o.seller_id = :party_id
      AND (CAST(:status AS TEXT) IS NULL OR o.status = CAST(:status AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR o.id < CAST(:cursor_id AS TEXT))
    ORDER BY o.id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_product(row: Any) -> ProductSummary | None:
    if row.product_name is None:
        return None
    return ProductSummary(
        name=row.product_name,
        unit=row.product_unit,
        price_cents=row.product_price_cents,
    )


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        product_id=row.product_id,
        quantity=row.quantity,
        unit_price_cents=row.unit_price_cents,
        total_price_cents=row.total_price_cents,
        delivery_address=row.delivery_address,
        payment_method=row.payment_method,
        notes=row.notes,
        status=OrderStatus(row.status),
        cancelled_by=row.cancelled_by,
        cancel_reason=row.cancel_reason,
        delivered_at=row.delivered_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        product=_row_to_product(row),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "product_id": order.product_id,
                "quantity": order.quantity,
                "unit_price_cents": order.unit_price_cents,
                "total_price_cents": order.total_price_cents,
                "delivery_address": order.delivery_address,
                "payment_method": order.payment_method,
                "notes": order.notes,
                "status": order.status.value,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update_status(
        self, order: Order, expected_status: OrderStatus, db: AsyncSession
    ) -> bool:
        """Persist order.status (and cancel/delivery fields) if the stored
        status is still ``expected_status``. Returns False on a lost race."""
        result = await db.execute(
            _UPDATE_STATUS_SQL,
            {
                "id": order.id,
                "status": order.status.value,
                "cancelled_by": order.cancelled_by,
                "cancel_reason": order.cancel_reason,
                "delivered_at": order.delivered_at,
                "expected_status": expected_status.value,
            },
        )
        return result.fetchone() is not None

    async def list_by_buyer(
        self,
        buyer_id: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        return await self._list(_LIST_BY_BUYER_SQL, buyer_id, status, limit, cursor_id, db)

    async def list_by_seller(
        self,
        seller_id: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        return await self._list(_LIST_BY_SELLER_SQL, seller_id, status, limit, cursor_id, db)

    async def _list(
        self,
        sql: Any,
        party_id: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            sql,
            {
                "party_id": party_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_order(row) for row in rows]
