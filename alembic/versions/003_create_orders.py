"""003: create orders table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(32)     PRIMARY KEY,
            buyer_id            VARCHAR(64)     NOT NULL,
            seller_id           VARCHAR(64)     NOT NULL,
            product_id          VARCHAR(64)     NOT NULL,
            quantity            INT             NOT NULL,
            unit_price_cents    BIGINT          NOT NULL,
            total_price_cents   BIGINT          NOT NULL,
            delivery_address    VARCHAR(255)    NOT NULL,
            payment_method      VARCHAR(20)     NOT NULL DEFAULT 'cash',
            notes               VARCHAR(500),
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            cancelled_by        VARCHAR(64),
            cancel_reason       VARCHAR(500),
            delivered_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_quantity           CHECK (quantity > 0),
            CONSTRAINT ck_orders_unit_price         CHECK (unit_price_cents > 0),
            CONSTRAINT ck_orders_total_price        CHECK (total_price_cents = quantity * unit_price_cents),
            CONSTRAINT ck_orders_payment_method     CHECK (
                payment_method IN ('cash', 'mpesa', 'bank_transfer', 'card')
            ),
            CONSTRAINT ck_orders_status             CHECK (
                status IN ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')
            ),
            CONSTRAINT ck_orders_cancelled_by       CHECK (
                (status = 'cancelled') = (cancelled_by IS NOT NULL)
            ),
            CONSTRAINT ck_orders_delivered_at       CHECK (
                (status = 'delivered') = (delivered_at IS NOT NULL)
            ),
            CONSTRAINT ck_orders_cancelled_party    CHECK (
                cancelled_by IS NULL OR cancelled_by IN (buyer_id, seller_id)
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_seller_status ON orders (seller_id, status, id DESC);")
    op.execute("CREATE INDEX idx_orders_product ON orders (product_id);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Buyer orders — one product line each; never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
