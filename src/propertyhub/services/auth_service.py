"""Authentication service: password hashing and user lookup/creation."""

import logging

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.app.config import get_settings
from propertyhub.domain.errors import DuplicateEmailError
from propertyhub.domain.models import User

logger = logging.getLogger(__name__)

settings = get_settings()
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Unrecognised or corrupt hash: treat as a failed login.
        logger.warning("Password hash could not be verified")
        return False


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: str = "broker",
    phone: str | None = None,
) -> User:
    """Insert a user with a hashed password.

    The pre-insert lookup gives the common case a clean error; two concurrent
    registrations can still both pass it, and then the unique index on
    ``users.email`` rejects the second insert, which surfaces the same way.
    """
    email = normalize_email(email)
    if await get_user_by_email(db, email):
        raise DuplicateEmailError()

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        phone=phone,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Concurrent registration rejected for %s", email)
        raise DuplicateEmailError()
    await db.refresh(user)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    """Return the user when the credentials match, else None."""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user
