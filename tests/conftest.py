from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from queuewise.core.config import Settings
from queuewise.core.db import Base
from queuewise.core.security import create_access_token, hash_password
from queuewise.main import create_app
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.nurse import Nurse
from queuewise.models.platform import PlatformAdmin
from queuewise.models.user import RoleEnum, User, UserProfile

# 10:00 in Cairo
NOW = datetime(2025, 12, 20, 8, 0)
TODAY = "2025-12-20"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        JWT_SECRET="test-secret",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'queuewise.db'}",
        LOG_LEVEL="WARNING",
        REDIS_URL=None,
        RATE_LIMIT_BOOKING=1000,
        RATE_LIMIT_SEARCH=1000,
        RATE_LIMIT_QUEUE_COUNT=1000,
        RATE_LIMIT_ADMIN=1000,
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield app
    await app.state.rate_limiter.close()
    await app.state.engine.dispose()


@pytest.fixture
async def session(app):
    async with app.state.sessionmaker() as s:
        yield s


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


# ---------- factories ----------
@pytest.fixture
def make_clinic(session):
    async def _make(slug="nile-clinic", is_active=True, name="Nile Clinic"):
        clinic = Clinic(name=name, slug=slug, is_active=is_active)
        session.add(clinic)
        await session.commit()
        return clinic
    return _make


@pytest.fixture
def make_doctor(session):
    counter = {"n": 0}

    async def _make(clinic, is_active=True, name="Dr. Hassan", user_id=None):
        counter["n"] += 1
        doctor = Doctor(
            clinic_id=clinic.id,
            name=name,
            is_active=is_active,
            user_id=user_id,
            created_at=NOW + timedelta(seconds=counter["n"]),
        )
        session.add(doctor)
        await session.commit()
        return doctor
    return _make


@pytest.fixture
def make_nurse(session):
    async def _make(clinic, doctor=None, name="Mona"):
        nurse = Nurse(clinic_id=clinic.id, name=name, doctor_id=doctor.id if doctor else None)
        session.add(nurse)
        await session.commit()
        return nurse
    return _make


@pytest.fixture
def make_user(session):
    async def _make(email, password="secret123", is_active=True):
        user = User(email=email, display_name=email.split("@")[0],
                    hashed_password=hash_password(password), is_active=is_active)
        session.add(user)
        await session.commit()
        return user
    return _make


@pytest.fixture
def make_staff(session, make_user):
    async def _make(clinic, email, role=RoleEnum.owner, doctor=None, nurse=None):
        user = await make_user(email)
        session.add(UserProfile(
            uid=user.id, email=email, display_name=user.display_name,
            clinic_id=clinic.id, role=role, doctor_id=doctor.id if doctor else None,
            nurse_id=nurse.id if nurse else None,
        ))
        for row in (doctor, nurse):
            if row is not None:
                row.user_id = user.id
        await session.commit()
        return user
    return _make


@pytest.fixture
def make_platform_admin(session, make_user):
    async def _make(email="root@queuewise.com", is_active=True):
        user = await make_user(email)
        session.add(PlatformAdmin(uid=user.id, email=email, is_active=is_active))
        await session.commit()
        return user
    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        token = create_access_token(settings, subject=user.id, extra={"email": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


def booking_body(clinic, doctor, phone="01012345678", name="Ahmed Mohamed Ali", **extra):
    body = {
        "source": "patient",
        "clinicSlug": clinic.slug,
        "doctorId": doctor.id,
        "name": name,
        "phone": phone,
        "age": 34,
    }
    body.update(extra)
    return body
