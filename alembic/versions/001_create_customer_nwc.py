"""001: create customer_nwc table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE customer_nwc (
            id              SERIAL          PRIMARY KEY,
            customer_id     VARCHAR(255)    NOT NULL,
            server_key      VARCHAR(128)    NOT NULL,
            user_key        VARCHAR(128)    NOT NULL,
            uri             TEXT            NOT NULL,
            app_service     VARCHAR(255)    NOT NULL,
            budget          BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_customer_nwc_customer_app_service UNIQUE (customer_id, app_service)
        );
    """)
    op.execute("CREATE INDEX idx_customer_nwc_customer_id ON customer_nwc (customer_id);")
    op.execute("""
        CREATE TRIGGER trg_customer_nwc_updated_at
            BEFORE UPDATE ON customer_nwc
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE customer_nwc IS "
        "'Per-customer Nostr Wallet Connect credentials, one row per (customer, app_service)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS customer_nwc CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
