from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings, require_platform_admin
from queuewise.core.auth_provider import Identity
from queuewise.core.config import Settings
from queuewise.core.db import get_db, utcnow
from queuewise.core.rate_limit import rate_limit
from queuewise.schemas.clinic import ClinicOut
from queuewise.schemas.platform import ClientCreate, ClientCreated, ClientListOut, ClientOut, PlatformMeOut
from queuewise.services.platform import PlatformService
from queuewise.services.tickets import TicketService

router = APIRouter(prefix="/api/platform", tags=["platform"], dependencies=[Depends(rate_limit("admin"))])


@router.get("/me", response_model=PlatformMeOut)
async def me(admin: Identity = Depends(require_platform_admin)):
    return PlatformMeOut(uid=admin.uid, email=admin.email)

# ---------- clients ----------
@router.get("/clients", response_model=ClientListOut)
async def list_clients(
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    clients = await PlatformService(db, settings).list_clients()
    return ClientListOut(clients=[ClientOut.model_validate(c) for c in clients])

@router.post("/clients", response_model=ClientCreated, status_code=201)
async def create_client(
    payload: ClientCreate,
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    client, clinic = await PlatformService(db, settings).create_client(
        admin.uid,
        owner_email=payload.ownerEmail,
        clinic_name=payload.clinicName,
        clinic_slug=payload.clinicSlug,
        plan=payload.plan,
        owner_password=payload.ownerPassword,
    )
    return ClientCreated(
        clientId=client.id, clinicId=clinic.id, ownerUid=client.owner_uid, clinic=ClinicOut.model_validate(clinic),
    )

# ---------- lifecycle ----------
@router.post("/clients/{client_id}/suspend")
async def suspend_client(
    client_id: str,
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    res = await PlatformService(db, settings).suspend_client(admin.uid, client_id)
    return {"ok": True, "message": "Client suspended successfully",
            "clientId": res.client_id, "clinicId": res.clinic_id, "usersDisabled": res.users_affected}

@router.post("/clients/{client_id}/cancel")
async def cancel_client(
    client_id: str,
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    res = await PlatformService(db, settings).cancel_client(admin.uid, client_id)
    return {"ok": True, "message": "Client canceled successfully",
            "clientId": res.client_id, "clinicId": res.clinic_id, "usersDisabled": res.users_affected}

@router.post("/clients/{client_id}/reactivate")
async def reactivate_client(
    client_id: str,
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    res = await PlatformService(db, settings).reactivate_client(admin.uid, client_id)
    return {"ok": True, "message": "Client reactivated successfully",
            "clientId": res.client_id, "clinicId": res.clinic_id, "usersEnabled": res.users_affected}

@router.delete("/clients/{client_id}")
async def delete_client(
    client_id: str,
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    res = await PlatformService(db, settings).delete_client(admin.uid, client_id)
    return {"ok": True, "message": "Client deleted permanently",
            "clientId": res.client_id, "clinicId": res.clinic_id, "deletedBy": admin.uid}

# ---------- maintenance ----------
@router.post("/maintenance/expired-tickets")
async def purge_expired_tickets(
    admin: Identity = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    deleted = await TicketService(db).delete_expired(utcnow())
    return {"ok": True, "deleted": deleted}
