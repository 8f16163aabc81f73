# tests/conftest.py
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.model_registry  # noqa: F401
from app.database.connection import Base, get_db
from app.prescription_engine.dependencies import get_draft_gateway
from app.prescription_engine.lifecycle import PrescriptionLifecycleEngine
from app.system_models.appointment_model.appointment_model import Appointment
from app.system_models.doctor_model.doctor_model import Doctor
from app.system_models.patient_model.patient_model import Patient
from app.users.identity import Actor, Role
from app.users.security import create_access_token
from tests.fakes import scripted_gateway

DOCTOR = Actor(actor_id="doc1", role=Role.DOCTOR)
OTHER_DOCTOR = Actor(actor_id="doc2", role=Role.DOCTOR)
PATIENT = Actor(actor_id="pat1", role=Role.PATIENT)
ADMIN = Actor(actor_id="admin1", role=Role.ADMIN)


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        bind=db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def seeded(session_factory):
    """Two doctors, two patients and appointments in every interesting state."""
    async with session_factory() as session:
        session.add_all(
            [
                Doctor(id="doc1", name="Dr. Ada Mensah", email="ada@clinic.test", specialization="General Practice"),
                Doctor(id="doc2", name="Dr. Lee Park", email="lee@clinic.test", specialization="Cardiology"),
                Patient(id="pat1", name="Sam Rivera", email="sam@mail.test", age=34, gender="male",
                        phone="555-0101", medical_history="Seasonal allergies"),
                Patient(id="pat2", name="Noor Aziz", email="noor@mail.test", age=61, gender="female",
                        phone="555-0102", medical_history=""),
                Appointment(id="apt1", patient_id="pat1", doctor_id="doc1", date=date(2026, 10, 20),
                            time="09:00", symptoms="Runny nose, sneezing and mild sore throat"),
                Appointment(id="apt2", patient_id="pat1", doctor_id="doc1", date=date(2026, 10, 21),
                            time="09:00", symptoms="Persistent headache behind the eyes"),
                Appointment(id="apt3", patient_id="pat2", doctor_id="doc1", date=date(2026, 10, 22),
                            time="10:30", symptoms="Stomach cramps after meals"),
                Appointment(id="apt-doc2", patient_id="pat2", doctor_id="doc2", date=date(2026, 10, 20),
                            time="11:00", symptoms="Chest tightness when climbing stairs"),
                Appointment(id="apt-cancelled", patient_id="pat1", doctor_id="doc1", date=date(2026, 10, 23),
                            time="14:00", symptoms="Back pain", status="cancelled"),
                Appointment(id="apt-no-patient", patient_id="ghost", doctor_id="doc1", date=date(2026, 10, 24),
                            time="15:00", symptoms="Dizziness when standing up"),
            ]
        )
        await session.commit()
    return session_factory


@pytest.fixture
async def db(seeded):
    async with seeded() as session:
        yield session


@pytest.fixture
def gateway():
    return scripted_gateway()


@pytest.fixture
def engine(gateway):
    return PrescriptionLifecycleEngine(gateway)


def auth_header(actor: Actor) -> dict:
    return {"Authorization": f"Bearer {create_access_token(actor.actor_id, actor.role)}"}


@pytest.fixture
async def client(seeded, gateway):
    from app.main import app

    async def override_get_db():
        async with seeded() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_draft_gateway] = lambda: gateway
    app.state.draft_gateway = gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
