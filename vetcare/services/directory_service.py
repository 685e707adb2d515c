"""Directory service - Lookups of pets, clinics, veterinarians and users."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vetcare.models.clinic import Clinic, Veterinarian
from vetcare.models.pet import Pet
from vetcare.models.user import User


class DirectoryService:
    """Read-only lookups of the records an appointment refers to."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_pet_by_uuid(self, pet_uuid: str) -> Pet | None:
        """Get a pet by public id with its owner loaded."""
        result = await self.db.execute(
            select(Pet)
            .options(selectinload(Pet.owner))
            .where(Pet.pet_uuid == pet_uuid)
        )
        return result.scalar_one_or_none()

    async def get_clinic(self, clinic_id: int) -> Clinic | None:
        return await self.db.get(Clinic, clinic_id)

    async def get_veterinarian(self, vet_id: int) -> Veterinarian | None:
        """Get a veterinarian with the linked user loaded."""
        result = await self.db.execute(
            select(Veterinarian)
            .options(selectinload(Veterinarian.user))
            .where(Veterinarian.id == vet_id)
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)
