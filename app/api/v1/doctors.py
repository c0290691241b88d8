from fastapi import APIRouter, Depends
from typing import List
from uuid import UUID

from app.api.deps import get_doctor_service
from app.schemas.doctor import DoctorCreate, DoctorResponse, DoctorUpdate
from app.services.doctor_service import DoctorService

router = APIRouter()

@router.post("", response_model=DoctorResponse, status_code=201)
async def create_doctor(
    doctor_data: DoctorCreate,
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.create_doctor(doctor_data)

@router.get("", response_model=List[DoctorResponse])
async def read_doctors(
    active_only: bool = False,
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.get_doctors(active_only)

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def read_doctor(doctor_id: UUID, service: DoctorService = Depends(get_doctor_service)):
    return await service.get_doctor(doctor_id)

@router.patch("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: UUID,
    doctor_data: DoctorUpdate,
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.update_doctor(doctor_id, doctor_data)
