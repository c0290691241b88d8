from fastapi import APIRouter, Depends, Query
from datetime import date
from typing import List, Literal, Optional
from uuid import UUID

from app.api.deps import get_appointment_service
from app.db.models import Appointment, AppointmentStatus
from app.schemas.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentDeletedResponse,
    AppointmentResponse,
    AppointmentUpdate,
    AvailabilityCheck,
    AvailabilityResponse,
)
from app.services.appointment_service import AppointmentService
from app.services.scheduling import Slot, status_color

router = APIRouter()

def construct_response(appointment: Appointment) -> AppointmentResponse:
    # patient and treatment are eagerly loaded by the service
    title = None
    if appointment.patient:
        title = appointment.patient.full_name
        if appointment.treatment:
            title = f"{title} - {appointment.treatment.name}"

    return AppointmentResponse(
        id=appointment.id,
        patient_id=appointment.patient_id,
        doctor_id=appointment.doctor_id,
        room_id=appointment.room_id,
        treatment_id=appointment.treatment_id,
        date=appointment.date,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        status=appointment.status,
        observations=appointment.observations,
        confirmed=appointment.confirmed,
        confirmation_date=appointment.confirmation_date,
        reminder_sent=appointment.reminder_sent,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        color=status_color(appointment.status),
        resource_id=appointment.room_id,
        title=title
    )

@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    request: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.create_appointment(request)
    return construct_response(appointment)

@router.get("", response_model=List[AppointmentResponse])
async def read_appointments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    patient_id: Optional[UUID] = None,
    doctor_id: Optional[UUID] = None,
    room_id: Optional[UUID] = None,
    status: Optional[AppointmentStatus] = None,
    view: Optional[Literal["day", "week", "month"]] = None,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointments = await service.list_appointments(
        start_date=start_date,
        end_date=end_date,
        patient_id=patient_id,
        doctor_id=doctor_id,
        room_id=room_id,
        status=status,
        view=view
    )
    return [construct_response(a) for a in appointments]

@router.get("/today", response_model=List[AppointmentResponse])
async def read_today_appointments(service: AppointmentService = Depends(get_appointment_service)):
    appointments = await service.get_today_appointments()
    return [construct_response(a) for a in appointments]

@router.get("/patient/{patient_id}", response_model=List[AppointmentResponse])
async def read_patient_appointments(
    patient_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointments = await service.get_appointments_by_patient(patient_id)
    return [construct_response(a) for a in appointments]

@router.post("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    request: AvailabilityCheck,
    service: AppointmentService = Depends(get_appointment_service)
):
    available = await service.check_availability(request)
    return AvailabilityResponse(available=available)

@router.get("/available-slots", response_model=List[Slot])
async def read_available_slots(
    day: date = Query(alias="date"),
    doctor_id: UUID = Query(alias="doctorId"),
    treatment_id: UUID = Query(alias="treatmentId"),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.get_available_slots(day, doctor_id, treatment_id)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def read_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.get_appointment(appointment_id)
    return construct_response(appointment)

@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: UUID,
    request: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.update_appointment(appointment_id, request)
    return construct_response(appointment)

@router.patch("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.confirm_appointment(appointment_id)
    return construct_response(appointment)

@router.patch("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: UUID,
    request: Optional[AppointmentCancel] = None,
    service: AppointmentService = Depends(get_appointment_service)
):
    reason = request.reason if request else None
    appointment = await service.cancel_appointment(appointment_id, reason)
    return construct_response(appointment)

@router.patch("/{appointment_id}/no-show", response_model=AppointmentResponse)
async def mark_no_show(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.mark_no_show(appointment_id)
    return construct_response(appointment)

@router.delete("/{appointment_id}", response_model=AppointmentDeletedResponse)
async def delete_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await service.delete_appointment(appointment_id)
    return AppointmentDeletedResponse(
        message="Appointment deleted",
        appointment=construct_response(appointment)
    )
