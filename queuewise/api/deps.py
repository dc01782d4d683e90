from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.auth_provider import Identity, LocalAuthProvider
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.core.errors import Forbidden, Unauthorized
from queuewise.models.user import RoleEnum, UserProfile
from queuewise.services.platform import PlatformService


bearer = HTTPBearer(auto_error=False)

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    if creds is None or not creds.credentials:
        raise Unauthorized("Unauthorized - Missing or invalid authorization header")
    return await LocalAuthProvider(db, settings).verify_token(creds.credentials)

async def get_current_profile(
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    profile = await db.get(UserProfile, identity.uid)
    if not profile:
        raise Forbidden("no clinic profile for this account")
    if not profile.is_active:
        raise Forbidden("profile is inactive")
    return profile

# --- Role-based dependency ---
def require_roles(*roles: RoleEnum):
    async def _guard(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
        if profile.role not in roles:
            raise Forbidden("Permission denied")
        return profile
    return _guard

# --- Platform admins ---
async def require_platform_admin(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    token = creds.credentials if creds else None
    return await PlatformService(db, settings).verify_platform_admin(token)
