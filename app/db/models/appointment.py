from enum import Enum
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import date as date_type, datetime
from uuid import UUID, uuid4

from app.core.utils import utc_now

if TYPE_CHECKING:
    from .doctor import Doctor
    from .patient import Patient
    from .room import Room
    from .treatment import Treatment

class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    patient_id: UUID = Field(foreign_key="patients.id", index=True)
    doctor_id: UUID = Field(foreign_key="doctors.id", index=True)
    room_id: UUID = Field(foreign_key="rooms.id", index=True)
    treatment_id: Optional[UUID] = Field(default=None, foreign_key="treatments.id")
    date: date_type = Field(index=True)
    start_time: datetime = Field(sa_column=Column(DateTime, nullable=False))
    end_time: datetime = Field(sa_column=Column(DateTime, nullable=False))
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)
    observations: Optional[str] = None
    confirmed: bool = Field(default=False)
    confirmation_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    reminder_sent: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime, nullable=False))

    patient: "Patient" = Relationship(back_populates="appointments")
    doctor: "Doctor" = Relationship(back_populates="appointments")
    room: "Room" = Relationship(back_populates="appointments")
    treatment: Optional["Treatment"] = Relationship(back_populates="appointments")
