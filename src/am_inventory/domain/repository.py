"""StockLedger Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the PostgreSQL implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_inventory.domain.models import Product


class StockLedgerProtocol(Protocol):
    async def get_product(self, db: AsyncSession, product_id: str) -> Product | None: ...

    async def reserve(self, db: AsyncSession, product_id: str, quantity: int) -> Product: ...

    async def release(
        self, db: AsyncSession, product_id: str, quantity: int
    ) -> Product | None: ...
