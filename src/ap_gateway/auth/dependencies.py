"""FastAPI dependencies: get_current_user, require_role, request_id_of.

Usage in any protected router:
    from src.ap_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.database import get_db_session
from src.ap_common.enums import UserRole
from src.ap_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    PermissionDeniedError,
)
from src.ap_gateway.auth.jwt_handler import decode_token
from src.ap_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


def request_id_of(request: Request) -> str | None:
    """request_id injected by RequestLogMiddleware, if it ran."""
    return getattr(request.state, "request_id", None)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    Raises AccountDisabledError (403) if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


def require_role(*roles: UserRole) -> Callable[..., Awaitable[UserModel]]:
    """Dependency factory: the caller must hold one of ``roles``."""
    allowed = frozenset(r.value for r in roles)

    async def _guard(current_user: UserModel = Depends(get_current_user)) -> UserModel:
        if current_user.role not in allowed:
            raise PermissionDeniedError(" or ".join(sorted(allowed)))
        return current_user

    return _guard


require_admin = require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN)
