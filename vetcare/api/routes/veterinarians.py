"""Veterinarian routes - Weekly availability."""

from fastapi import APIRouter, HTTPException

from vetcare.api.deps import DBSession
from vetcare.schemas.appointment import AvailabilityWindowResponse
from vetcare.services.availability_service import AvailabilityService
from vetcare.services.directory_service import DirectoryService

router = APIRouter()


@router.get("/{vet_id}/availability", response_model=list[AvailabilityWindowResponse])
async def get_availability(vet_id: int, db: DBSession):
    """Get the recurring weekly windows of a veterinarian."""
    if await DirectoryService(db).get_veterinarian(vet_id) is None:
        raise HTTPException(status_code=404, detail="Veterinarian not found")

    service = AvailabilityService(db)
    return await service.list_availability(vet_id)
