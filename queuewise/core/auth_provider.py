"""
Account store behind bearer authentication.

Accounts live in the ``users`` table; staff membership lives separately in
``user_profiles``. Disabling an account is how tenant suspension locks staff
out: ``verify_token`` rejects disabled accounts even with a valid token.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.config import Settings
from queuewise.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from queuewise.core.security import decode_access_token, hash_password
from queuewise.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str


class LocalAuthProvider:
    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings

    async def verify_token(self, token: str) -> Identity:
        payload = decode_access_token(self.settings, token)
        user = await self.session.get(User, payload["sub"])
        if not user:
            raise Unauthorized("Unauthorized - Unknown user")
        if not user.is_active:
            raise Unauthorized("Unauthorized - Account disabled")
        return Identity(uid=user.id, email=user.email)

    async def get_user_by_email(self, email: str) -> User | None:
        q = select(User).where(User.email == email.strip().lower())
        return (await self.session.execute(q)).scalar_one_or_none()

    async def create_user(self, email: str, password: str, display_name: str = "") -> User:
        """Stage a new account. Caller commits."""
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        if await self.get_user_by_email(email):
            raise Conflict("email already registered")
        user = User(
            email=email.strip().lower(),
            display_name=display_name,
            hashed_password=hash_password(password),
        )
        self.session.add(user)
        await self.session.flush()
        logger.info("Created account %s", user.id)
        return user

    async def set_disabled(self, uid: str, disabled: bool) -> None:
        user = await self.session.get(User, uid)
        if not user:
            raise NotFound("user not found")
        user.is_active = not disabled
        await self.session.flush()

    async def delete_user(self, uid: str) -> None:
        user = await self.session.get(User, uid)
        if not user:
            raise NotFound("user not found")
        await self.session.delete(user)
        await self.session.flush()
