"""Bearer tokens for wager users and operators.

Tokens are HS256 JWTs signed with settings.JWT_SECRET and carry:
    sub   user id (16-hex) or an operator label
    role  "user" or "admin"; admin tokens pass require_admin without a users row
    type  always "access"

Tokens cannot be revoked; they stay valid until "exp".
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pm_common.enums import UserRole
from src.pm_common.errors import UnauthorizedError

_TOKEN_TYPE = "access"
_INVALID = "Invalid or expired token"


def create_access_token(user_id: str, role: UserRole = UserRole.USER) -> str:
    issued = datetime.now(UTC)
    claims = {
        "sub": user_id,
        "role": role.value,
        "type": _TOKEN_TYPE,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return str(jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Verify signature and expiry; raise UnauthorizedError on any problem."""
    try:
        # a single pinned algorithm, never the one named in the token header
        claims: dict[str, str] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise UnauthorizedError(_INVALID) from None
    if claims.get("type") != _TOKEN_TYPE or not claims.get("sub"):
        raise UnauthorizedError(_INVALID)
    return claims
