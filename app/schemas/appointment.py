from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from uuid import UUID
from datetime import date as date_type, datetime
from typing import Optional

from app.core.utils import to_naive_utc
from app.db.models.appointment import AppointmentStatus
from app.services.scheduling import ensure_valid_interval

# Request bodies accept both snake_case and the camelCase names used by the
# admin frontend (startTime, roomId, ...).
request_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

def normalise_interval(values: BaseModel) -> BaseModel:
    values.start_time = to_naive_utc(values.start_time)
    values.end_time = to_naive_utc(values.end_time)
    ensure_valid_interval(values.start_time, values.end_time)
    if values.date is None:
        values.date = values.start_time.date()
    elif values.date != values.start_time.date():
        raise ValueError("date must be the calendar day of start_time")
    return values

class AppointmentCreate(BaseModel):
    model_config = request_config

    patient_id: UUID
    doctor_id: UUID
    room_id: UUID
    treatment_id: Optional[UUID] = None
    date: Optional[date_type] = None
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    observations: Optional[str] = None
    confirmed: bool = False
    reminder_sent: bool = False

    @model_validator(mode="after")
    def check_interval(self):
        return normalise_interval(self)

class AppointmentUpdate(BaseModel):
    model_config = request_config

    patient_id: Optional[UUID] = None
    doctor_id: Optional[UUID] = None
    room_id: Optional[UUID] = None
    treatment_id: Optional[UUID] = None
    date: Optional[date_type] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    observations: Optional[str] = None
    confirmed: Optional[bool] = None
    confirmation_date: Optional[datetime] = None
    reminder_sent: Optional[bool] = None

class AppointmentCancel(BaseModel):
    reason: Optional[str] = None

class AvailabilityCheck(BaseModel):
    model_config = request_config

    date: Optional[date_type] = None
    start_time: datetime
    end_time: datetime
    room_id: UUID
    doctor_id: UUID
    exclude_appointment_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_interval(self):
        return normalise_interval(self)

class AvailabilityResponse(BaseModel):
    available: bool

class AppointmentResponse(BaseModel):
    id: UUID
    patient_id: UUID
    doctor_id: UUID
    room_id: UUID
    treatment_id: Optional[UUID]
    date: date_type
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    observations: Optional[str] = None
    confirmed: bool
    confirmation_date: Optional[datetime] = None
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime
    color: str
    resource_id: UUID
    title: Optional[str] = None

    class Config:
        from_attributes = True

class AppointmentDeletedResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
