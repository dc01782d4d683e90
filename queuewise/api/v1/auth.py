import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings, get_current_profile
from queuewise.core.auth_provider import LocalAuthProvider
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.core.errors import Forbidden, Unauthorized
from queuewise.core.rate_limit import rate_limit
from queuewise.core.security import create_access_token, verify_password
from queuewise.models.user import UserProfile
from queuewise.schemas.auth import LoginIn, ProfileOut, TokenOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=TokenOut, dependencies=[Depends(rate_limit("admin"))])
async def login(
    payload: LoginIn,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await LocalAuthProvider(db, settings).get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise Unauthorized("Invalid credentials")

    if not user.is_active:
        logger.info("Login refused for disabled account %s", user.id)
        raise Forbidden("Account disabled")

    token = create_access_token(settings, subject=user.id, extra={"email": user.email})
    return TokenOut(access_token=token)


@router.get("/me", response_model=ProfileOut)
async def me(profile: UserProfile = Depends(get_current_profile)):
    return profile
