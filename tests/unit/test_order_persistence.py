# tests/unit/test_order_persistence.py
"""Unit tests for OrderRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.am_common.enums import OrderStatus
from src.am_order.domain.models import Order, ProductSummary
from src.am_order.infrastructure.persistence import OrderRepository


def _make_row(**kwargs: Any) -> MagicMock:
    """Create a mock row with all Order fields."""
    row = MagicMock()
    row.id = kwargs.get("id", "order-1")
    row.buyer_id = kwargs.get("buyer_id", "buyer-1")
    row.seller_id = kwargs.get("seller_id", "seller-1")
    row.product_id = kwargs.get("product_id", "prod-1")
    row.quantity = kwargs.get("quantity", 10)
    row.unit_price_cents = kwargs.get("unit_price_cents", 12000)
    row.total_price_cents = kwargs.get("total_price_cents", 120000)
    row.delivery_address = kwargs.get("delivery_address", "12 Market Rd")
    row.payment_method = kwargs.get("payment_method", "cash")
    row.notes = kwargs.get("notes")
    row.status = kwargs.get("status", "pending")
    row.cancelled_by = kwargs.get("cancelled_by")
    row.cancel_reason = kwargs.get("cancel_reason")
    row.delivered_at = kwargs.get("delivered_at")
    row.created_at = kwargs.get("created_at", datetime.now(UTC))
    row.updated_at = kwargs.get("updated_at", datetime.now(UTC))
    row.product_name = kwargs.get("product_name", "Beans")
    row.product_unit = kwargs.get("product_unit", "kg")
    row.product_price_cents = kwargs.get("product_price_cents", 13000)
    return row


def _make_order(**kwargs: Any) -> Order:
    return Order(
        id=kwargs.get("id", "order-1"),
        buyer_id=kwargs.get("buyer_id", "buyer-1"),
        seller_id=kwargs.get("seller_id", "seller-1"),
        product_id=kwargs.get("product_id", "prod-1"),
        quantity=kwargs.get("quantity", 10),
        unit_price_cents=kwargs.get("unit_price_cents", 12000),
        total_price_cents=kwargs.get("total_price_cents", 120000),
        delivery_address=kwargs.get("delivery_address", "12 Market Rd"),
        status=kwargs.get("status", OrderStatus.PENDING),
        cancelled_by=kwargs.get("cancelled_by"),
        cancel_reason=kwargs.get("cancel_reason"),
    )


def _db_returning(*, one: Any = None, many: list[Any] | None = None) -> AsyncMock:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = one
    result_mock.fetchall.return_value = many or []
    db.execute.return_value = result_mock
    return db


class TestOrderRepository:
    async def test_save_executes_insert(self) -> None:
        db = AsyncMock()
        await OrderRepository().save(_make_order(), db)
        db.execute.assert_awaited_once()
        params = db.execute.await_args.args[1]
        assert params["status"] == "pending"
        assert params["total_price_cents"] == 120000

    async def test_get_by_id_returns_order(self) -> None:
        db = _db_returning(one=_make_row())
        order = await OrderRepository().get_by_id("order-1", db)
        assert order is not None
        assert order.id == "order-1"
        assert order.status is OrderStatus.PENDING

    async def test_get_by_id_returns_none_when_not_found(self) -> None:
        db = _db_returning(one=None)
        assert await OrderRepository().get_by_id("missing", db) is None

    async def test_row_maps_cancellation_fields(self) -> None:
        db = _db_returning(
            one=_make_row(status="cancelled", cancelled_by="buyer-1", cancel_reason="late")
        )
        order = await OrderRepository().get_by_id("order-1", db)
        assert order is not None
        assert order.status is OrderStatus.CANCELLED
        assert order.cancelled_by == "buyer-1"
        assert order.cancel_reason == "late"

    async def test_update_status_passes_expected_status(self) -> None:
        db = _db_returning(one=MagicMock(id="order-1"))
        order = _make_order(status=OrderStatus.CONFIRMED)

        applied = await OrderRepository().update_status(order, OrderStatus.PENDING, db)

        assert applied is True
        params = db.execute.await_args.args[1]
        assert params["status"] == "confirmed"
        assert params["expected_status"] == "pending"

    async def test_update_status_reports_lost_race(self) -> None:
        db = _db_returning(one=None)
        order = _make_order(status=OrderStatus.CANCELLED, cancelled_by="seller-1")
        assert await OrderRepository().update_status(order, OrderStatus.SHIPPED, db) is False

    async def test_list_by_buyer_returns_empty(self) -> None:
        db = _db_returning(many=[])
        assert await OrderRepository().list_by_buyer("buyer-1", None, 21, None, db) == []

    async def test_list_by_buyer_passes_filters(self) -> None:
        db = _db_returning(many=[_make_row(id="order-5")])
        orders = await OrderRepository().list_by_buyer("buyer-1", "pending", 21, "order-10", db)
        assert [o.id for o in orders] == ["order-5"]
        params = db.execute.await_args.args[1]
        assert params == {
            "party_id": "buyer-1",
            "status": "pending",
            "cursor_id": "order-10",
            "limit": 21,
        }

    async def test_list_by_seller_returns_orders(self) -> None:
        db = _db_returning(many=[_make_row(), _make_row(id="order-2")])
        orders = await OrderRepository().list_by_seller("seller-1", None, 21, None, db)
        assert len(orders) == 2
        assert db.execute.await_args.args[1]["party_id"] == "seller-1"

    @pytest.mark.parametrize("method", ["list_by_buyer", "list_by_seller"])
    async def test_list_sql_orders_newest_first(self, method: str) -> None:
        db = _db_returning(many=[])
        await getattr(OrderRepository(), method)("user-1", None, 5, None, db)
        sql = str(db.execute.await_args.args[0])
        assert "ORDER BY o.id DESC" in sql

    async def test_row_maps_product_summary(self) -> None:
        db = _db_returning(one=_make_row())
        order = await OrderRepository().get_by_id("order-1", db)
        assert order is not None
        assert order.product == ProductSummary(name="Beans", unit="kg", price_cents=13000)
        # current catalogue price is reported alongside the snapshot, not over it
        assert order.unit_price_cents == 12000

    async def test_deleted_product_leaves_summary_empty(self) -> None:
        db = _db_returning(
            many=[_make_row(product_name=None, product_unit=None, product_price_cents=None)]
        )
        orders = await OrderRepository().list_by_buyer("buyer-1", None, 21, None, db)
        assert len(orders) == 1
        assert orders[0].product is None

    @pytest.mark.parametrize("method", ["get_by_id", "list_by_buyer", "list_by_seller"])
    async def test_reads_left_join_products(self, method: str) -> None:
        db = _db_returning(one=None, many=[])
        repo = OrderRepository()
        if method == "get_by_id":
            await repo.get_by_id("order-1", db)
        else:
            await getattr(repo, method)("user-1", None, 5, None, db)
        sql = str(db.execute.await_args.args[0])
        assert "LEFT JOIN products p ON p.id = o.product_id" in sql
