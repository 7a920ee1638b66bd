"""WagerRepository: append-only wager log (raw text() SQL)."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_wager.domain.models import Wager

_INSERT_WAGER_SQL = text("""
    INSERT INTO wagers
        (id, user_id, event_id, outcome_id, position_id, wallet_id,
         pledge, wager, loan, leverage, force_leverage, payout,
         topup_amount, profit_amount, bonus_amount)
    VALUES
        (:id, :user_id, :event_id, :outcome_id, :position_id, :wallet_id,
         :pledge, :wager, :loan, :leverage, :force_leverage, :payout,
         :topup_amount, :profit_amount, :bonus_amount)
    RETURNING created_at
""")


class WagerRepository:
    async def insert(self, db: AsyncSession, wager: Wager) -> Wager:
        row = (
            await db.execute(
                _INSERT_WAGER_SQL,
                {
                    "id": wager.id,
                    "user_id": wager.user_id,
                    "event_id": wager.event_id,
                    "outcome_id": wager.outcome_id,
                    "position_id": wager.position_id,
                    "wallet_id": wager.wallet_id,
                    "pledge": wager.pledge,
                    "wager": wager.wager,
                    "loan": wager.loan,
                    "leverage": wager.leverage,
                    "force_leverage": wager.force_leverage,
                    "payout": wager.payout,
                    "topup_amount": wager.allocation.get("topup", 0),
                    "profit_amount": wager.allocation.get("profit", 0),
                    "bonus_amount": wager.allocation.get("bonus", 0),
                },
            )
        ).fetchone()
        if row is not None:
            wager.created_at = row.created_at
        return wager
