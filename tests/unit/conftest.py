"""In-memory collaborators for the order lifecycle unit tests.

FakeSession mimics the transactional contract the service relies on: writes
made through the fakes are journaled on the session and undone by
``rollback()``; ``commit()`` makes them permanent.
"""

import asyncio
import dataclasses
from collections import defaultdict
from collections.abc import Callable
from typing import Any

import pytest

from src.am_common.enums import OrderStatus, UserRole
from src.am_common.errors import InsufficientStockError, ProductNotFoundError
from src.am_gateway.auth.dependencies import Principal
from src.am_inventory.domain.models import Product
from src.am_notify.domain.events import OrderEvent
from src.am_order.application.service import OrderLifecycleService
from src.am_order.domain.models import Order

BUYER_ID = "buyer-1"
OTHER_BUYER_ID = "buyer-2"
SELLER_ID = "seller-1"
OTHER_SELLER_ID = "seller-2"
PRODUCT_ID = "prod-beans"


class FakeSession:
    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self.commits = 0
        self.rollbacks = 0

    def on_rollback(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    async def commit(self) -> None:
        self._undo.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.rollbacks += 1


class FakeStockLedger:
    """Per-product asyncio.Lock around check-and-decrement, like a row lock."""

    def __init__(self) -> None:
        self.products: dict[str, Product] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def add(self, product: Product) -> None:
        self.products[product.id] = product

    async def get_product(self, db: Any, product_id: str) -> Product | None:
        product = self.products.get(product_id)
        return dataclasses.replace(product) if product else None

    async def reserve(self, db: FakeSession, product_id: str, quantity: int) -> Product:
        async with self._locks[product_id]:
            product = self.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            await asyncio.sleep(0)  # let competing reservations queue on the lock
            if product.available_quantity < quantity:
                raise InsufficientStockError(quantity, product.available_quantity)
            product.available_quantity -= quantity
            product.in_stock = product.available_quantity > 0
            db.on_rollback(lambda: self._credit(product_id, quantity))
            return dataclasses.replace(product)

    async def release(self, db: FakeSession, product_id: str, quantity: int) -> Product | None:
        async with self._locks[product_id]:
            product = self.products.get(product_id)
            if product is None:
                return None
            before = (product.available_quantity, product.in_stock)
            self._credit(product_id, quantity)

            def _undo() -> None:
                product.available_quantity, product.in_stock = before

            db.on_rollback(_undo)
            return dataclasses.replace(product)

    def _credit(self, product_id: str, quantity: int) -> None:
        product = self.products[product_id]
        product.available_quantity += quantity
        product.in_stock = True


class FakeOrderRepository:
    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}
        self.fail_on_save = False

    async def save(self, order: Order, db: FakeSession) -> None:
        if self.fail_on_save:
            raise RuntimeError("insert failed")
        self.orders[order.id] = dataclasses.replace(order)
        db.on_rollback(lambda: self.orders.pop(order.id, None))

    async def get_by_id(self, order_id: str, db: Any) -> Order | None:
        order = self.orders.get(order_id)
        return dataclasses.replace(order) if order else None

    async def update_status(
        self, order: Order, expected_status: OrderStatus, db: FakeSession
    ) -> bool:
        stored = self.orders.get(order.id)
        if stored is None or stored.status != expected_status:
            return False
        previous = dataclasses.replace(stored)
        stored.status = order.status
        stored.cancelled_by = order.cancelled_by
        stored.cancel_reason = order.cancel_reason
        if stored.delivered_at is None:
            stored.delivered_at = order.delivered_at
        stored.updated_at = order.updated_at
        db.on_rollback(lambda: self.orders.__setitem__(order.id, previous))
        return True

    async def list_by_buyer(
        self, buyer_id: str, status: str | None, limit: int, cursor_id: str | None, db: Any
    ) -> list[Order]:
        return self._list(lambda o: o.buyer_id == buyer_id, status, limit, cursor_id)

    async def list_by_seller(
        self, seller_id: str, status: str | None, limit: int, cursor_id: str | None, db: Any
    ) -> list[Order]:
        return self._list(lambda o: o.seller_id == seller_id, status, limit, cursor_id)

    def _list(
        self,
        match: Callable[[Order], bool],
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]:
        rows = [
            dataclasses.replace(o)
            for o in self.orders.values()
            if match(o)
            and (status is None or o.status.value == status)
            and (cursor_id is None or o.id < cursor_id)
        ]
        rows.sort(key=lambda o: o.id, reverse=True)
        return rows[:limit]


class RecordingDispatcher:
    def __init__(self, fail: bool = False) -> None:
        self.events: list[OrderEvent] = []
        self.fail = fail

    def publish(self, event: OrderEvent) -> None:
        if self.fail:
            raise ConnectionError("transport down")
        self.events.append(event)


def make_product(**kwargs: Any) -> Product:
    defaults: dict[str, Any] = dict(
        id=PRODUCT_ID,
        seller_id=SELLER_ID,
        name="Beans",
        category="Legumes",
        price_cents=12000,
        unit="kg",
        available_quantity=100,
        in_stock=True,
    )
    defaults.update(kwargs)
    return Product(**defaults)


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def ledger() -> FakeStockLedger:
    fake = FakeStockLedger()
    fake.add(make_product())
    return fake


@pytest.fixture
def repo() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def service(
    repo: FakeOrderRepository, ledger: FakeStockLedger, dispatcher: RecordingDispatcher
) -> OrderLifecycleService:
    return OrderLifecycleService(repo=repo, ledger=ledger, dispatcher=dispatcher)


@pytest.fixture
def buyer() -> Principal:
    return Principal(user_id=BUYER_ID, role=UserRole.BUYER)


@pytest.fixture
def other_buyer() -> Principal:
    return Principal(user_id=OTHER_BUYER_ID, role=UserRole.BUYER)


@pytest.fixture
def seller() -> Principal:
    return Principal(user_id=SELLER_ID, role=UserRole.SELLER)


@pytest.fixture
def other_seller() -> Principal:
    return Principal(user_id=OTHER_SELLER_ID, role=UserRole.SELLER)


@pytest.fixture
def new_session() -> Callable[[], FakeSession]:
    """Factory for independent sessions, one per concurrent request."""
    return FakeSession


@pytest.fixture
def failing_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher(fail=True)
