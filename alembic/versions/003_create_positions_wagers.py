"""003: create positions and wagers tables

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
        CREATE TABLE positions (
            id                  VARCHAR(16)     PRIMARY KEY,
            user_id             VARCHAR(16)     NOT NULL REFERENCES users (id),
            event_id            VARCHAR(16)     NOT NULL REFERENCES events (id),
            outcome_id          VARCHAR(16)     NOT NULL REFERENCES event_outcomes (id),
            is_leveraged        BOOLEAN         NOT NULL,
            pledge              BIGINT          NOT NULL DEFAULT 0,
            wager               BIGINT          NOT NULL DEFAULT 0,
            loan                BIGINT          NOT NULL DEFAULT 0,
            payout              BIGINT          NOT NULL DEFAULT 0,
            leverage            NUMERIC(10, 4)  NOT NULL DEFAULT 1,
            stop_probability    DOUBLE PRECISION NOT NULL DEFAULT 0,
            type                VARCHAR(8)      NOT NULL DEFAULT 'open',
            last_reason         VARCHAR(16),
            settled_amount      BIGINT          NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            closed_at           TIMESTAMPTZ,
            CONSTRAINT ck_positions_type        CHECK (type IN ('open', 'closed')),
            CONSTRAINT ck_positions_reason      CHECK (
                last_reason IS NULL OR last_reason IN ('WIN', 'LOSS', 'MARGINCALLED')
            ),
            CONSTRAINT ck_positions_closed      CHECK ((type = 'closed') = (last_reason IS NOT NULL)),
            CONSTRAINT ck_positions_loan        CHECK (loan = wager - pledge AND loan >= 0)
        );
    """)
    # At most one open position per (user, event, outcome, leverage class)
    op.execute("""
        CREATE UNIQUE INDEX uq_positions_open_bucket
            ON positions (user_id, event_id, outcome_id, is_leveraged)
            WHERE type = 'open';
    """)
    op.execute("CREATE INDEX idx_positions_event_open ON positions (event_id) WHERE type = 'open';")
    op.execute("CREATE INDEX idx_positions_user ON positions (user_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE wagers (
            id                  VARCHAR(16)     PRIMARY KEY,
            user_id             VARCHAR(16)     NOT NULL REFERENCES users (id),
            event_id            VARCHAR(16)     NOT NULL REFERENCES events (id),
            outcome_id          VARCHAR(16)     NOT NULL REFERENCES event_outcomes (id),
            position_id         VARCHAR(16)     NOT NULL REFERENCES positions (id),
            wallet_id           VARCHAR(16)     NOT NULL REFERENCES wallets (id),
            pledge              BIGINT          NOT NULL,
            wager               BIGINT          NOT NULL,
            loan                BIGINT          NOT NULL,
            leverage            NUMERIC(10, 4)  NOT NULL,
            force_leverage      BOOLEAN         NOT NULL DEFAULT FALSE,
            payout              BIGINT          NOT NULL,
            topup_amount        BIGINT          NOT NULL DEFAULT 0,
            profit_amount       BIGINT          NOT NULL DEFAULT 0,
            bonus_amount        BIGINT          NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_wagers_pledge_gt_0    CHECK (pledge > 0),
            CONSTRAINT ck_wagers_allocation     CHECK (
                topup_amount + profit_amount + bonus_amount = pledge
            ),
            CONSTRAINT ck_wagers_bonus_cap      CHECK (bonus_amount <= 1000)
        );
    """)
    op.execute("CREATE INDEX idx_wagers_user_event ON wagers (user_id, event_id);")
    op.execute("COMMENT ON TABLE wagers IS 'Immutable record of every accepted wager';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wagers CASCADE;")
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
