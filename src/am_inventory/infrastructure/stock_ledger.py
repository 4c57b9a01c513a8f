"""StockLedger — concrete implementation of StockLedgerProtocol.

Every quantity mutation is a single PostgreSQL ``UPDATE ... RETURNING``.
``reserve`` is a conditional decrement: the row lock taken by the UPDATE
linearizes concurrent reservations on one product, and the WHERE clause is
re-evaluated against the winner's committed quantity, so the loser sees
0 rows instead of driving the quantity negative.

Transaction ownership: the CALLER (application service) starts and commits
the transaction. A rollback undoes any reservation made inside it.
"""

import logging
from typing import NoReturn

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.errors import InsufficientStockError, ProductNotFoundError
from src.am_inventory.domain.models import Product

logger = logging.getLogger(__name__)

# products.available_quantity and orders.quantity are INT columns.
MAX_QUANTITY = 2**31 - 1

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_PRODUCT_COLUMNS = """
    id, seller_id, name, category, price_cents, unit,
    available_quantity, in_stock, created_at, updated_at
"""

_GET_PRODUCT_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE id = :product_id
""")

# SET expressions see the pre-update row, so in_stock is derived from the
# decremented value.
_RESERVE_SQL = text(f"""
    UPDATE products
    SET available_quantity = available_quantity - :quantity,
        in_stock = (available_quantity - :quantity) > 0,
        updated_at = NOW()
    WHERE id = :product_id AND available_quantity >= :quantity
    RETURNING {_PRODUCT_COLUMNS}
""")

_RELEASE_SQL = text(f"""
    UPDATE products
    SET available_quantity = available_quantity + :quantity,
        in_stock = TRUE,
        updated_at = NOW()
    WHERE id = :product_id
    RETURNING {_PRODUCT_COLUMNS}
""")


def _row_to_product(row: object) -> Product:
    return Product(
        id=row.id,  # type: ignore[attr-defined]
        seller_id=row.seller_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        price_cents=row.price_cents,  # type: ignore[attr-defined]
        unit=row.unit,  # type: ignore[attr-defined]
        available_quantity=row.available_quantity,  # type: ignore[attr-defined]
        in_stock=row.in_stock,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class StockLedger:
    """Owns products.available_quantity / in_stock; touches nothing else."""

    async def get_product(self, db: AsyncSession, product_id: str) -> Product | None:
        result = await db.execute(_GET_PRODUCT_SQL, {"product_id": product_id})
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def reserve(self, db: AsyncSession, product_id: str, quantity: int) -> Product:
        """Decrement stock by ``quantity`` or fail without touching the row.

        Raises:
            ProductNotFoundError: no product with this id.
            InsufficientStockError: quantity exceeds what is available now.
        """
        if quantity <= 0:
            raise ValueError(f"reserve quantity must be positive, got {quantity}")
        if quantity > MAX_QUANTITY:
            # No row can hold this much; the driver would reject the parameter.
            await self._raise_unavailable(db, product_id, quantity)
        result = await db.execute(
            _RESERVE_SQL, {"product_id": product_id, "quantity": quantity}
        )
        row = result.fetchone()
        if row is None:
            await self._raise_unavailable(db, product_id, quantity)
        product = _row_to_product(row)
        logger.info(
            "Reserved %d of product %s (remaining %d)",
            quantity,
            product_id,
            product.available_quantity,
        )
        return product

    async def _raise_unavailable(
        self, db: AsyncSession, product_id: str, quantity: int
    ) -> NoReturn:
        current = await self.get_product(db, product_id)
        if current is None:
            raise ProductNotFoundError(product_id)
        raise InsufficientStockError(quantity, current.available_quantity)

    async def release(
        self, db: AsyncSession, product_id: str, quantity: int
    ) -> Product | None:
        """Credit ``quantity`` back and mark the product in stock.

        Returns None when the product has since been removed from the catalog;
        there is nothing left to credit in that case.
        """
        if quantity <= 0:
            raise ValueError(f"release quantity must be positive, got {quantity}")
        result = await db.execute(
            _RELEASE_SQL, {"product_id": product_id, "quantity": quantity}
        )
        row = result.fetchone()
        if row is None:
            logger.warning(
                "Release of %d skipped: product %s no longer exists", quantity, product_id
            )
            return None
        product = _row_to_product(row)
        logger.info(
            "Released %d of product %s (available %d)",
            quantity,
            product_id,
            product.available_quantity,
        )
        return product
