from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings, require_roles
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.core.rate_limit import rate_limit
from queuewise.core.security import create_access_token
from queuewise.models.user import RoleEnum, UserProfile
from queuewise.schemas.auth import ProfileOut
from queuewise.schemas.invite import (
    AcceptInviteIn, AcceptInviteOut, InviteCreate, InviteCreated, InviteOut, InviteVerifyOut,
)
from queuewise.services.invites import InviteService

router = APIRouter(prefix="/api/invites", tags=["invites"])

owner_only = require_roles(RoleEnum.owner)


# ---------- owner ----------
@router.post("/", response_model=InviteCreated, status_code=201)
async def create_invite(
    payload: InviteCreate,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    invite, token = await InviteService(db, settings).create_invite(
        profile.clinic_id, payload.email, payload.role, profile.uid, payload.expiry_days
    )
    return InviteCreated(invite=InviteOut.model_validate(invite), token=token)

@router.get("/", response_model=list[InviteOut])
async def list_invites(
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await InviteService(db, settings).list_invites(profile.clinic_id)

@router.post("/{invite_id}/revoke", response_model=InviteOut)
async def revoke_invite(
    invite_id: str,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await InviteService(db, settings).revoke_invite(profile.clinic_id, invite_id)

# ---------- invitee ----------
@router.get("/verify", response_model=InviteVerifyOut, dependencies=[Depends(rate_limit("search"))])
async def verify_invite(
    token: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    invite = await InviteService(db, settings).verify_token(token)
    if invite is None:
        return InviteVerifyOut(valid=False)
    return InviteVerifyOut(valid=True, invite=InviteOut.model_validate(invite))

@router.post("/accept", response_model=AcceptInviteOut, dependencies=[Depends(rate_limit("search"))])
async def accept_invite(
    payload: AcceptInviteIn,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    profile = await InviteService(db, settings).accept_invite(payload.token, payload.password, payload.display_name)
    token = create_access_token(settings, subject=profile.uid, extra={"email": profile.email})
    return AcceptInviteOut(profile=ProfileOut.model_validate(profile), access_token=token)
