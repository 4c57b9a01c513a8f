"""Integration-test fixtures.

Requires a PostgreSQL database with migrations applied
(``alembic upgrade head``). Tests are skipped when DATABASE_URL is not
reachable. Notifications go to Redis on a best-effort basis; a missing
Redis only produces "Dropped ..." warnings.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError

from src.am_common.database import async_session_factory, engine
from src.main import app

_INSERT_PRODUCT_SQL = text("""
    INSERT INTO products (id, seller_id, name, category, price_cents, unit,
        available_quantity, in_stock)
    VALUES (:id, :seller_id, :name, :category, :price_cents, :unit,
        :available_quantity, :available_quantity > 0)
""")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if "integration" in str(item.path):
            item.add_marker(pytest.mark.integration)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; skips when PostgreSQL is down."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM products LIMIT 1"))
    except (OSError, OperationalError, DBAPIError) as exc:
        pytest.skip(f"PostgreSQL not available: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def seed_product() -> Callable[..., Awaitable[str]]:
    """Insert a fresh product row (the catalog service owns creation)."""

    async def _seed(
        seller_id: str,
        available_quantity: int = 100,
        price_cents: int = 12000,
        name: str = "Beans",
    ) -> str:
        product_id = f"prod-{uuid.uuid4().hex[:12]}"
        async with async_session_factory() as session:
            await session.execute(
                _INSERT_PRODUCT_SQL,
                {
                    "id": product_id,
                    "seller_id": seller_id,
                    "name": name,
                    "category": "Legumes",
                    "price_cents": price_cents,
                    "unit": "kg",
                    "available_quantity": available_quantity,
                },
            )
            await session.commit()
        return product_id

    return _seed


@pytest.fixture
def new_user_id() -> Callable[[str], str]:
    return lambda prefix: f"{prefix}-{uuid.uuid4().hex[:8]}"
