import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.core.errors import UnauthorizedError, ValidationError
from homestay.core.security import get_password_hash, verify_password
from homestay.models import User, UserRole
from homestay.schemas.user import RegisterRequest, UpdateDetailsRequest, UpdatePasswordRequest

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        if await UserService.get_by_email(db, email):
            raise ValidationError("Email already registered")

        user = User(
            name=name,
            email=email.lower(),
            hashed_password=get_password_hash(password),
            role=role,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"User #{user.id} registered with role {user.role.value}")
        return user

    @staticmethod
    async def register(db: AsyncSession, payload: RegisterRequest) -> User:
        # Self-registration never grants admin
        return await UserService.create_user(db, payload.name, payload.email, payload.password)

    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> User:
        user = await UserService.get_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid credentials")
        return user

    @staticmethod
    async def update_details(
        db: AsyncSession, user: User, payload: UpdateDetailsRequest
    ) -> User:
        if payload.email and payload.email.lower() != user.email:
            existing = await UserService.get_by_email(db, payload.email)
            if existing and existing.id != user.id:
                raise ValidationError("Email already registered")
            user.email = payload.email.lower()
        if payload.name:
            user.name = payload.name

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def update_password(
        db: AsyncSession, user: User, payload: UpdatePasswordRequest
    ) -> User:
        if not verify_password(payload.current_password, user.hashed_password):
            raise UnauthorizedError("Password is incorrect")

        user.hashed_password = get_password_hash(payload.new_password)
        await db.commit()
        logger.info(f"User #{user.id} changed password")
        return user
