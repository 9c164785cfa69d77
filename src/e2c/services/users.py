"""User registration and login."""

import logging
from typing import Optional
from uuid import UUID

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from e2c.db.models import User as UserModel
from e2c.db.models import UserRole
from e2c.errors import EmailTakenError, InvalidCredentialsError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


class UserService:
    """Service for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> UserModel:
        """Create a new user; email must be unused."""
        email = email.lower()
        if await self.get_by_email(email):
            raise EmailTakenError(email)

        user = UserModel(
            name=name,
            email=email,
            password=hash_password(password),
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise EmailTakenError(email) from exc
        await self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> UserModel:
        """Return the user for valid credentials."""
        user = await self.get_by_email(email.lower())
        if not user or not verify_password(password, str(user.password)):
            raise InvalidCredentialsError()
        return user

    async def get_user(self, user_id: UUID) -> Optional[UserModel]:
        """Get user by ID."""
        return await self.db.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()
