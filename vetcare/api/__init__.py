from fastapi import APIRouter
from vetcare.api.routes import users, appointments, veterinarians

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(veterinarians.router, prefix="/veterinarians", tags=["Veterinarians"])
