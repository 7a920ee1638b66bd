"""002: create events and event_outcomes tables

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
    op.execute("CREATE SEQUENCE event_code_seq START 1;")

    op.execute("""
        CREATE TABLE events (
            id                  VARCHAR(16)     PRIMARY KEY,
            code                VARCHAR(32)     NOT NULL,
            ticker              VARCHAR(32)     NOT NULL,
            name                VARCHAR(255)    NOT NULL,
            name_jp             VARCHAR(255),
            description         TEXT,
            description_jp      TEXT,
            rules               TEXT,
            timezone            VARCHAR(64)     NOT NULL DEFAULT 'UTC',
            event_images_url    TEXT[]          NOT NULL DEFAULT '{}',
            status              VARCHAR(16)     NOT NULL DEFAULT 'created',
            ends_at             TIMESTAMPTZ     NOT NULL,
            participants_count  INT             NOT NULL DEFAULT 0,
            volume              BIGINT          NOT NULL DEFAULT 0,
            opened_at           TIMESTAMPTZ,
            closed_at           TIMESTAMPTZ,
            resolved_at         TIMESTAMPTZ,
            winning_outcome_id  VARCHAR(16),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_events_code           UNIQUE (code),
            CONSTRAINT uq_events_ticker         UNIQUE (ticker),
            CONSTRAINT ck_events_ticker         CHECK (ticker ~ '^[A-Z0-9]+$'),
            CONSTRAINT ck_events_status         CHECK (
                status IN ('created', 'open', 'paused', 'closed', 'resolved')
            ),
            CONSTRAINT ck_events_volume_gte_0   CHECK (volume >= 0)
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_events_name_ci ON events (lower(name));")
    op.execute("CREATE INDEX idx_events_status ON events (status);")
    op.execute("""
        CREATE TRIGGER trg_events_updated_at
            BEFORE UPDATE ON events
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE event_outcomes (
            id                              VARCHAR(16)     PRIMARY KEY,
            event_id                        VARCHAR(16)     NOT NULL REFERENCES events (id),
            code                            VARCHAR(8)      NOT NULL,
            name                            VARCHAR(255)    NOT NULL,
            name_jp                         VARCHAR(255),
            sort_order                      INT             NOT NULL,
            min_pledge                      BIGINT          NOT NULL,
            max_pledge                      BIGINT          NOT NULL,
            max_leverage                    NUMERIC(10, 4)  NOT NULL,
            min_cash_proportion_for_pool    NUMERIC(10, 6)  NOT NULL DEFAULT 0,
            starting_wager                  BIGINT          NOT NULL,
            total_pledge                    BIGINT          NOT NULL DEFAULT 0,
            total_wager                     BIGINT          NOT NULL DEFAULT 0,
            estimated_probability           DOUBLE PRECISION NOT NULL DEFAULT 0,
            created_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_event_outcomes_code       UNIQUE (event_id, code),
            CONSTRAINT ck_event_outcomes_bounds     CHECK (min_pledge <= max_pledge),
            CONSTRAINT ck_event_outcomes_leverage   CHECK (max_leverage >= 1),
            CONSTRAINT ck_event_outcomes_seed_gt_0  CHECK (starting_wager > 0),
            CONSTRAINT ck_event_outcomes_wager      CHECK (total_wager >= total_pledge)
        );
    """)
    op.execute("CREATE INDEX idx_event_outcomes_event ON event_outcomes (event_id, sort_order);")
    op.execute("COMMENT ON TABLE event_outcomes IS 'Outcome ledger: bounds and pool aggregates in cents';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS event_outcomes CASCADE;")
    op.execute("DROP TABLE IF EXISTS events CASCADE;")
    op.execute("DROP SEQUENCE IF EXISTS event_code_seq;")
