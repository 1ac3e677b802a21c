import asyncio
import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def _truncate(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return password.encode('utf-8')[:72].decode('utf-8', errors='ignore')


class AuthService:

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(_truncate(password))

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(_truncate(plain_password), hashed_password)

    @classmethod
    async def hash_password_async(cls, password: str) -> str:
        """Hash in a worker thread so the event loop keeps serving requests."""
        return await asyncio.to_thread(cls.hash_password, password)

    @classmethod
    async def verify_password_async(cls, plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(cls.verify_password, plain_password, hashed_password)
