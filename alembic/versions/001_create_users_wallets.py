"""001: create common functions, users, wallets and wallet transactions

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
        CREATE TABLE users (
            id              VARCHAR(16)     PRIMARY KEY,
            email           VARCHAR(255)    NOT NULL,
            role            VARCHAR(16)     NOT NULL DEFAULT 'user',
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email       UNIQUE (email),
            CONSTRAINT ck_users_role        CHECK (role IN ('user', 'admin'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE wallets (
            id              VARCHAR(16)     PRIMARY KEY,
            user_id         VARCHAR(16)     NOT NULL REFERENCES users (id),
            wallet_type     VARCHAR(16)     NOT NULL,
            balance         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallets_user_type     UNIQUE (user_id, wallet_type),
            CONSTRAINT ck_wallets_type          CHECK (wallet_type IN ('topup', 'profit', 'bonus')),
            CONSTRAINT ck_wallets_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'One row per (user, wallet_type); balances in cents';")

    op.execute("""
        CREATE TABLE wallet_transactions (
            id              BIGSERIAL       PRIMARY KEY,
            wallet_id       VARCHAR(16)     NOT NULL REFERENCES wallets (id),
            user_id         VARCHAR(16)     NOT NULL,
            entry_type      VARCHAR(32)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            reference_type  VARCHAR(32),
            reference_id    VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_wallet_tx_wallet ON wallet_transactions (wallet_id, id DESC);")
    op.execute("CREATE INDEX idx_wallet_tx_reference ON wallet_transactions (reference_type, reference_id);")
    op.execute("COMMENT ON TABLE wallet_transactions IS 'Append-only wallet journal';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallet_transactions CASCADE;")
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
