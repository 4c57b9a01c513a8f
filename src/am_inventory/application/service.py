"""ProductQueryService — read-only stock view over the catalog's products.

Catalog CRUD belongs to the catalog service; this only reports what the
StockLedger currently holds.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.errors import ProductNotFoundError
from src.am_inventory.application.schemas import ProductResponse
from src.am_inventory.domain.repository import StockLedgerProtocol
from src.am_inventory.infrastructure.stock_ledger import StockLedger


class ProductQueryService:
    def __init__(self, ledger: StockLedgerProtocol | None = None) -> None:
        self._ledger: StockLedgerProtocol = ledger or StockLedger()

    async def get_product(self, db: AsyncSession, product_id: str) -> ProductResponse:
        product = await self._ledger.get_product(db, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return ProductResponse.from_domain(product)
