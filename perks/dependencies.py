from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from perks.core.database import AsyncDBSession
from perks.core.exceptions import AuthenticationError, InvalidTokenError
from perks.models.users import User
from perks.services.token_service import TokenService

# Security scheme; missing credentials are reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)


def get_token_service() -> TokenService:
    return TokenService()


async def get_current_user(
    session: AsyncDBSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> User:
    if credentials is None:
        raise AuthenticationError("No token provided")

    try:
        user_id = token_service.verify_access(credentials.credentials)
    except InvalidTokenError:
        raise AuthenticationError("Invalid token")

    user = await session.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")

    return user

