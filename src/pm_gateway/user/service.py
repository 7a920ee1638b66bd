"""User service for dev scripts: find-or-create users and issue tokens.

Registration and login belong to an external identity service; the engine only
needs a users row (plus its three wallets) for every token it accepts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import UserNotFoundError
from src.pm_common.id_generator import generate_id
from src.pm_gateway.auth.jwt_handler import create_access_token
from src.pm_gateway.user.db_models import UserModel
from src.pm_wallet.domain.repository import WalletRepositoryProtocol
from src.pm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, wallet_repo: WalletRepositoryProtocol | None = None) -> None:
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def find_by_email(self, db: AsyncSession, email: str) -> UserModel:
        result = await db.execute(select(UserModel).where(UserModel.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(email)
        return user

    async def ensure_user(self, db: AsyncSession, email: str) -> UserModel:
        """Return the user for email, creating it and its wallets on first use."""
        email = email.lower()
        try:
            result = await db.execute(select(UserModel).where(UserModel.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                user = UserModel(id=generate_id(), email=email, is_active=True)
                db.add(user)
                await db.flush()  # users row must exist before wallets reference it
                logger.info("Created user %s for %s", user.id, email)
            await self._wallets.create_wallets(db, str(user.id))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return user

    async def issue_token(self, db: AsyncSession, email: str) -> tuple[UserModel, str]:
        user = await self.ensure_user(db, email)
        return user, create_access_token(str(user.id))
