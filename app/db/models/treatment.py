from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

from app.core.utils import utc_now

if TYPE_CHECKING:
    from .appointment import Appointment

class Treatment(SQLModel, table=True):
    __tablename__ = "treatments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: Optional[str] = None
    code: int = Field(index=True, unique=True)
    price: float = Field(default=0)
    vat_percentage: float = Field(default=21)
    duration: Optional[int] = None # minutes
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime, nullable=False))

    appointments: List["Appointment"] = Relationship(back_populates="treatment")
