"""Account, credential and token handling.

Two kinds of bearer token are issued: ``access`` tokens for a normal session
and short-lived ``recovery`` tokens embedded in password-reset links. Both
carry the user's ``token_version``; bumping it revokes every token issued
before.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.config import settings
from civmanager.errors import InvalidOperation
from civmanager.models.user import User
from civmanager.services.notification_service import notify_password_reset

logger = logging.getLogger(__name__)

ACCESS = "access"
RECOVERY = "recovery"


@dataclass
class TokenClaims:
    user_id: int
    purpose: str
    version: int


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _encode_token(user: User, purpose: str, lifetime: timedelta) -> str:
    expire = datetime.now(timezone.utc) + lifetime
    payload = {
        "sub": str(user.id),
        "purpose": purpose,
        "ver": user.token_version,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(user: User) -> str:
    return _encode_token(user, ACCESS, timedelta(minutes=settings.access_token_expire_minutes))


def create_recovery_token(user: User) -> str:
    return _encode_token(
        user, RECOVERY, timedelta(minutes=settings.recovery_token_expire_minutes)
    )


def decode_token(token: str) -> TokenClaims | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        user_id = payload.get("sub")
        if user_id is None:
            return None
        return TokenClaims(
            user_id=int(user_id),
            purpose=payload.get("purpose", ACCESS),
            version=int(payload.get("ver", 0)),
        )
    except (JWTError, ValueError):
        return None


async def get_user_for_token(db: AsyncSession, token: str, purpose: str) -> User | None:
    """Resolve a bearer token of the given purpose to a live user."""
    claims = decode_token(token)
    if claims is None or claims.purpose != purpose:
        return None
    user = await get_user_by_id(db, claims.user_id)
    if user is None or user.token_version != claims.version:
        return None
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str, username: str, password: str) -> User:
    user = User(
        email=email,
        username=username,
        hashed_password=hash_password(password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email or username
        await db.rollback()
        raise InvalidOperation("Email or username already registered") from exc
    await db.refresh(user)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def request_password_reset(db: AsyncSession, email: str) -> str | None:
    """Email a recovery link if the account exists.

    Returns the recovery token, or None for unknown addresses. Callers must not
    reveal which case happened.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email %s", email)
        return None
    token = create_recovery_token(user)
    await notify_password_reset(user, token)
    return token


async def update_password(db: AsyncSession, user: User, new_password: str) -> User:
    """Set a new password and revoke every outstanding token of the user."""
    user.hashed_password = hash_password(new_password)
    user.token_version += 1
    await db.commit()
    await db.refresh(user)
    logger.info("Password updated for user %s; existing sessions revoked", user.id)
    return user
