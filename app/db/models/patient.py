from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import date, datetime
from uuid import UUID, uuid4

from app.core.utils import utc_now

if TYPE_CHECKING:
    from .appointment import Appointment

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    first_name: str
    last_name: str
    document_number: str = Field(index=True, unique=True)
    phone: str
    email: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None # M, F, O
    observations: Optional[str] = None
    is_active: bool = Field(default=True)
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime, nullable=False))

    appointments: List["Appointment"] = Relationship(back_populates="patient")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
