import os
from dataclasses import dataclass
from datetime import time

# Settings are read at import time, so point them at a throwaway database first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RESEND_API_KEY"] = ""
os.environ["LOGFIRE_TOKEN"] = ""

import logfire
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vetcare.database import Base
from vetcare.models import Clinic, Pet, User, Veterinarian, VetAvailability
from tests.support import MONDAY_WEEKDAY

logfire.configure(send_to_logfire=False, console=False)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@dataclass
class Seed:
    owner: User
    other_owner: User
    admin: User
    vet_user: User
    vet: Veterinarian
    second_vet: Veterinarian
    clinic: Clinic
    pet: Pet
    second_pet: Pet
    other_pet: Pet


@pytest_asyncio.fixture
async def seed(session) -> Seed:
    owner = User(email="olivia@example.com", first_name="Olivia", last_name="Hart", role="user")
    other_owner = User(email="sam@example.com", first_name="Sam", last_name="Reed", role="user")
    admin = User(email="admin@example.com", first_name="Ada", last_name="Min", role="admin")
    vet_user = User(email="dr.lee@example.com", first_name="Jordan", last_name="Lee", role="veterinarian")
    second_vet_user = User(email="dr.park@example.com", first_name="Robin", last_name="Park", role="veterinarian")
    session.add_all([owner, other_owner, admin, vet_user, second_vet_user])
    await session.flush()

    clinic = Clinic(
        name="Riverside Animal Clinic",
        address="12 River Rd",
        city="Springfield",
        state="IL",
        postal_code="62701",
        phone_number="555-0100",
    )
    session.add(clinic)
    await session.flush()

    vet = Veterinarian(user_id=vet_user.id, clinic_id=clinic.id, specialization="General practice")
    second_vet = Veterinarian(user_id=second_vet_user.id, clinic_id=clinic.id, specialization="Surgery")
    pet = Pet(user_id=owner.id, name="Biscuit", species="dog")
    second_pet = Pet(user_id=owner.id, name="Mochi", species="cat")
    other_pet = Pet(user_id=other_owner.id, name="Rex", species="dog")
    session.add_all([vet, second_vet, pet, second_pet, other_pet])
    await session.flush()

    session.add_all([
        VetAvailability(
            vet_id=vet.id,
            clinic_id=clinic.id,
            day_of_week=MONDAY_WEEKDAY,
            start_time=time(9, 0),
            end_time=time(12, 0),
            is_available=True,
        ),
        VetAvailability(
            vet_id=vet.id,
            clinic_id=clinic.id,
            day_of_week=MONDAY_WEEKDAY + 1,
            start_time=time(9, 0),
            end_time=time(12, 0),
            is_available=False,
        ),
    ])
    await session.commit()

    return Seed(
        owner=owner,
        other_owner=other_owner,
        admin=admin,
        vet_user=vet_user,
        vet=vet,
        second_vet=second_vet,
        clinic=clinic,
        pet=pet,
        second_pet=second_pet,
        other_pet=other_pet,
    )
