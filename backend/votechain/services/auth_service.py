"""
Authentication service for account registration and login.
"""
import uuid
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from votechain.core.security import create_access_token, hash_password, verify_password
from votechain.models.user import User


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None
    ) -> Tuple[Optional[User], Optional[str]]:
        """
        Create a new account.

        Returns:
            Tuple of (user, error)
        """
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            return None, "Email already registered"

        user = User(
            email=email,
            full_name=full_name,
            hashed_password=hash_password(password),
        )
        self.db.add(user)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return None, "Email already registered"

        logger.info("Registered user {}", user.id)
        return user, None

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match an active account."""
        user = await self.get_user_by_email(email.strip().lower())
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token({"sub": str(user.id), "email": user.email})

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        try:
            user_uuid = uuid.UUID(str(user_id))
        except ValueError:
            return None
        return await self.db.get(User, user_uuid)
