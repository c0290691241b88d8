from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_history_service, get_patient_service
from app.schemas.history import HistoryEntry, PatientHistorySummary, PatientStatistics, TreatmentSessions
from app.schemas.patient import PatientCreate, PatientDeletedResponse, PatientResponse, PatientUpdate
from app.services.history_service import DEFAULT_TIMELINE_LIMIT, HistoryService
from app.services.patient_service import PatientService

router = APIRouter()

@router.post("", response_model=PatientResponse, status_code=201)
async def create_patient(
    payload: PatientCreate,
    service: PatientService = Depends(get_patient_service)
):
    return await service.create_patient(payload)

@router.get("", response_model=List[PatientResponse])
async def read_patients(
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    service: PatientService = Depends(get_patient_service)
):
    return await service.get_patients(search, skip, limit)

@router.get("/search-by-phone", response_model=List[PatientResponse])
async def search_patients_by_phone(
    phone: str,
    service: PatientService = Depends(get_patient_service)
):
    return await service.search_by_phone(phone)

@router.get("/{patient_id}", response_model=PatientResponse)
async def read_patient(patient_id: UUID, service: PatientService = Depends(get_patient_service)):
    return await service.get_patient(patient_id)

@router.patch("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    service: PatientService = Depends(get_patient_service)
):
    return await service.update_patient(patient_id, payload)

@router.delete("/{patient_id}", response_model=PatientDeletedResponse)
async def delete_patient(patient_id: UUID, service: PatientService = Depends(get_patient_service)):
    patient = await service.delete_patient(patient_id)
    return PatientDeletedResponse(
        message="Patient removed",
        patient=PatientResponse.model_validate(patient)
    )

@router.get("/{patient_id}/history/summary", response_model=PatientHistorySummary)
async def read_history_summary(patient_id: UUID, service: HistoryService = Depends(get_history_service)):
    return await service.get_treatment_summary(patient_id)

@router.get("/{patient_id}/history/treatments/{treatment_id}", response_model=TreatmentSessions)
async def read_treatment_sessions(
    patient_id: UUID,
    treatment_id: UUID,
    service: HistoryService = Depends(get_history_service)
):
    return await service.get_treatment_sessions(patient_id, treatment_id)

@router.get("/{patient_id}/history/timeline", response_model=List[HistoryEntry])
async def read_history_timeline(
    patient_id: UUID,
    limit: int = Query(default=DEFAULT_TIMELINE_LIMIT, ge=1, le=500),
    service: HistoryService = Depends(get_history_service)
):
    return await service.get_timeline(patient_id, limit)

@router.get("/{patient_id}/history/stats", response_model=PatientStatistics)
async def read_history_stats(patient_id: UUID, service: HistoryService = Depends(get_history_service)):
    return await service.get_statistics(patient_id)
