"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    from src.pm_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...

Every credential failure (missing header, bad signature, expired token, unknown
or disabled user, non-admin on an admin route) is a uniform 401.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import UserRole
from src.pm_common.errors import UnauthorizedError
from src.pm_gateway.auth.jwt_handler import decode_token
from src.pm_gateway.user.db_models import UserModel

# auto_error=False so a missing header reaches our own 401 instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def _token_claims(credentials: HTTPAuthorizationCredentials | None) -> dict[str, str]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing bearer token")
    return decode_token(credentials.credentials)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel it names."""
    payload = _token_claims(credentials)

    result = await db.execute(select(UserModel).where(UserModel.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise UnauthorizedError("Unknown or disabled user")
    return user


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, str]:
    """Admin routes trust the signed role claim; no user row is required."""
    payload = _token_claims(credentials)
    if payload.get("role") != UserRole.ADMIN.value:
        raise UnauthorizedError("Admin credentials required")
    return payload
