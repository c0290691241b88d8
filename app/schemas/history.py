from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import date as date_type, datetime

from app.db.models.appointment import AppointmentStatus

class HistoryEntry(BaseModel):
    id: UUID
    date: date_type
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    confirmed: bool
    observations: Optional[str] = None
    treatment_id: Optional[UUID] = None
    treatment_name: Optional[str] = None
    doctor_id: UUID
    doctor_name: str
    room_id: UUID
    room_name: str

class TreatmentHistory(BaseModel):
    treatment_id: UUID
    treatment_name: str
    treatment_code: int
    total_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    first_session: date_type
    last_session: date_type
    appointments: List[HistoryEntry]

class PatientHistorySummary(BaseModel):
    patient_id: UUID
    total_treatment_types: int
    total_sessions: int
    treatments: List[TreatmentHistory]

class TreatmentSessions(BaseModel):
    treatment_id: UUID
    treatment_name: str
    total_sessions: int
    appointments: List[HistoryEntry]

class PatientStatistics(BaseModel):
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    no_show_appointments: int
    upcoming_appointments: int
    first_appointment: Optional[date_type] = None
    last_appointment: Optional[date_type] = None
    most_frequent_treatment: Optional[str] = None
    treatment_types: int
