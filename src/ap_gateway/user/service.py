"""User service: register (with welcome bonus), login, refresh."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ap_common.enums import TransactionType, UserRole
from src.ap_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.ap_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.ap_gateway.auth.password import hash_password, verify_password
from src.ap_gateway.user.db_models import UserModel
from src.ap_wallet.domain.repository import WalletRepositoryProtocol
from src.ap_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger("ap.auth")


class UserService:
    def __init__(
        self,
        wallet_repo: WalletRepositoryProtocol | None = None,
        welcome_bonus: int | None = None,
    ) -> None:
        self._wallet: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._welcome_bonus = (
            settings.WELCOME_BONUS_AP if welcome_bonus is None else welcome_bonus
        )

    @property
    def welcome_bonus(self) -> int:
        return self._welcome_bonus

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> UserModel:
        """Create the user with a zero balance, then credit the welcome bonus.

        The bonus goes through the ledger as a REWARD transaction so the
        user's balance always equals the sum of their transactions. Both
        happen in one transaction; the caller commits.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
            role=UserRole.USER.value,
            level=1,
            experience=0,
            ap_coins=0,
            version=0,
        )
        db.add(user)
        await db.flush()

        if self._welcome_bonus > 0:
            await self._wallet.credit(
                db, str(user.id), self._welcome_bonus, TransactionType.REWARD,
                description="Welcome bonus",
            )
        # Loads created_at and the ap_coins written by raw SQL
        await db.refresh(user)
        logger.info("registered user=%s bonus=%d", user.id, self._welcome_bonus)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same InvalidCredentialsError.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.role),
            create_refresh_token(str(user.id), user.role),
        )

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]), str(payload.get("role", "USER")))
