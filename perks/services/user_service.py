import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from perks.core.exceptions import AuthenticationError, ConflictError, ValidationError
from perks.models.users import User, UserRole
from perks.schemas.auth import AuthPayload, LoginRequest, RegisterRequest, TokenPair, UserPublic
from perks.services.auth_service import AuthService
from perks.services.token_service import TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """Service for registration, login and session (refresh token) management."""

    def __init__(self, db: AsyncSession, token_service: Optional[TokenService] = None):
        self.db = db
        self.auth_service = AuthService()
        self.token_service = token_service or TokenService()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.exec(select(User).where(User.email == email.strip().lower()))
        return result.first()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def _start_session(self, user: User) -> TokenPair:
        """Issue a token pair and make its refresh token the only valid one."""
        tokens = self.token_service.issue(user.id)
        user.refresh_token = tokens.refresh_token
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return tokens

    def _auth_payload(self, user: User, tokens: TokenPair) -> AuthPayload:
        return AuthPayload(
            user=UserPublic.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def register_user(self, user_data: RegisterRequest) -> AuthPayload:
        if await self.get_user_by_email(user_data.email):
            raise ConflictError("Email already registered")

        new_user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=await self.auth_service.hash_password_async(user_data.password),
            company=user_data.company,
            role=(user_data.role or UserRole.INDIE_HACKER).value,
        )
        self.db.add(new_user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration for the same email
            await self.db.rollback()
            raise ConflictError("Email already registered")

        tokens = await self._start_session(new_user)
        logger.info(f"User registered: {new_user.email} (ID: {new_user.id})")
        return self._auth_payload(new_user, tokens)

    async def login_user(self, login_data: LoginRequest) -> AuthPayload:
        user = await self.get_user_by_email(login_data.email)
        if not user:
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await self.auth_service.verify_password_async(login_data.password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)

        tokens = await self._start_session(user)
        logger.info(f"User logged in: {user.email} (ID: {user.id})")
        return self._auth_payload(user, tokens)

    async def refresh_session(self, refresh_token: Optional[str]) -> TokenPair:
        if not refresh_token or not refresh_token.strip():
            raise ValidationError("Refresh token is required")

        try:
            user_id = self.token_service.verify_refresh(refresh_token)
        except AuthenticationError:
            raise AuthenticationError("Invalid refresh token")

        user = await self.get_user_by_id(user_id)
        # A token superseded by a later login/refresh is rejected even if unexpired
        if not user or user.refresh_token != refresh_token:
            logger.warning(f"Rejected stale or unknown refresh token for user {user_id}")
            raise AuthenticationError("Invalid refresh token")

        return await self._start_session(user)

    async def logout_user(self, user: User) -> None:
        user.refresh_token = None
        self.db.add(user)
        await self.db.commit()
        logger.info(f"User logged out: {user.email} (ID: {user.id})")

    @staticmethod
    def profile(user: User) -> UserPublic:
        return UserPublic.model_validate(user)
