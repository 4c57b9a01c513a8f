"""002: create products table

The catalog service owns product rows; this service only mutates
available_quantity / in_stock through the stock ledger.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE products (
            id                  VARCHAR(64)     PRIMARY KEY,
            seller_id           VARCHAR(64)     NOT NULL,
            name                VARCHAR(100)    NOT NULL,
            category            VARCHAR(32)     NOT NULL DEFAULT 'Other',
            price_cents         BIGINT          NOT NULL,
            unit                VARCHAR(10)     NOT NULL DEFAULT 'kg',
            available_quantity  INT             NOT NULL DEFAULT 0,
            in_stock            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_products_price_gt_0       CHECK (price_cents > 0),
            CONSTRAINT ck_products_quantity_gte_0   CHECK (available_quantity >= 0),
            CONSTRAINT ck_products_in_stock         CHECK (in_stock = (available_quantity > 0)),
            CONSTRAINT ck_products_unit             CHECK (
                unit IN ('kg', 'g', 'lb', 'piece', 'dozen', 'liter', 'bag', 'crate')
            ),
            CONSTRAINT ck_products_category         CHECK (
                category IN ('Vegetables', 'Fruits', 'Grains', 'Legumes',
                             'Dairy', 'Poultry', 'Livestock', 'Other')
            )
        );
    """)
    op.execute("CREATE INDEX idx_products_seller ON products (seller_id, created_at DESC);")
    op.execute("CREATE INDEX idx_products_category_stock ON products (category, in_stock);")
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE products IS "
        "'Seller listings — price in cents; stock mutated only via atomic conditional UPDATE';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
