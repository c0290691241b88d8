from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID

from app.api.deps import get_treatment_service
from app.schemas.treatment import TreatmentCreate, TreatmentPage, TreatmentResponse, TreatmentUpdate
from app.services.treatment_service import TreatmentService

router = APIRouter()

@router.post("", response_model=TreatmentResponse, status_code=201)
async def create_treatment(
    treatment_data: TreatmentCreate,
    service: TreatmentService = Depends(get_treatment_service)
):
    return await service.create_treatment(treatment_data)

@router.get("", response_model=TreatmentPage)
async def read_treatments(
    search: Optional[str] = None,
    active: Optional[bool] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    service: TreatmentService = Depends(get_treatment_service)
):
    return await service.get_treatments(search, active, page, limit)

@router.get("/{treatment_id}", response_model=TreatmentResponse)
async def read_treatment(treatment_id: UUID, service: TreatmentService = Depends(get_treatment_service)):
    return await service.get_treatment(treatment_id)

@router.patch("/{treatment_id}", response_model=TreatmentResponse)
async def update_treatment(
    treatment_id: UUID,
    treatment_data: TreatmentUpdate,
    service: TreatmentService = Depends(get_treatment_service)
):
    return await service.update_treatment(treatment_id, treatment_data)

@router.patch("/{treatment_id}/toggle-active", response_model=TreatmentResponse)
async def toggle_treatment(treatment_id: UUID, service: TreatmentService = Depends(get_treatment_service)):
    return await service.toggle_active(treatment_id)

@router.delete("/{treatment_id}")
async def delete_treatment(treatment_id: UUID, service: TreatmentService = Depends(get_treatment_service)):
    return await service.delete_treatment(treatment_id)
