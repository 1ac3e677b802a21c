"""
Access/refresh token issuing and verification.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from perks.core.config import settings
from perks.core.exceptions import InvalidTokenError
from perks.schemas.auth import TokenPair

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenService:
    """
    Issues signed JWT pairs and checks them.

    Access and refresh tokens are signed with distinct secrets and carry a
    ``type`` tag so one can never be used in place of the other. Issuing
    persists nothing; storing the refresh token on the user is the caller's
    job.
    """

    def __init__(
        self,
        access_secret: Optional[str] = None,
        refresh_secret: Optional[str] = None,
        access_ttl: Optional[timedelta] = None,
        refresh_ttl: Optional[timedelta] = None,
        algorithm: Optional[str] = None,
    ):
        self.access_secret = access_secret or settings.JWT_ACCESS_SECRET
        self.refresh_secret = refresh_secret or settings.JWT_REFRESH_SECRET
        self.access_ttl = access_ttl or timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES)
        self.refresh_ttl = refresh_ttl or timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
        self.algorithm = algorithm or settings.JWT_ALGORITHM

    def _encode(self, user_id: str, token_type: str, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _decode(self, token: str, token_type: str, secret: str) -> str:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning(f"{token_type.capitalize()} token has expired")
            raise InvalidTokenError(f"Invalid or expired {token_type} token")
        except jwt.JWTError as e:
            logger.warning(f"{token_type.capitalize()} token verification failed: {e}")
            raise InvalidTokenError(f"Invalid or expired {token_type} token")

        user_id = payload.get("userId")
        if payload.get("type") != token_type or not user_id:
            raise InvalidTokenError(f"Invalid or expired {token_type} token")
        return user_id

    def issue_access_token(self, user_id: str) -> str:
        return self._encode(user_id, ACCESS_TOKEN_TYPE, self.access_secret, self.access_ttl)

    def issue_refresh_token(self, user_id: str) -> str:
        return self._encode(user_id, REFRESH_TOKEN_TYPE, self.refresh_secret, self.refresh_ttl)

    def issue(self, user_id: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id),
            refresh_token=self.issue_refresh_token(user_id),
        )

    def verify_access(self, token: str) -> str:
        """Return the user id carried by a valid access token."""
        return self._decode(token, ACCESS_TOKEN_TYPE, self.access_secret)

    def verify_refresh(self, token: str) -> str:
        """Return the user id carried by a valid refresh token."""
        return self._decode(token, REFRESH_TOKEN_TYPE, self.refresh_secret)
