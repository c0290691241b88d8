from fastapi import APIRouter
from app.api.v1 import appointments, doctors, patients, rooms, treatments

api_router = APIRouter()

api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(treatments.router, prefix="/treatments", tags=["treatments"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
