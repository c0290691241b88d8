from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import date, datetime

class PatientBase(BaseModel):
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    document_number: str
    phone: str
    email: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, pattern="^[MFO]$")
    observations: Optional[str] = None

class PatientCreate(PatientBase):
    pass

class PatientUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, pattern="^[MFO]$")
    observations: Optional[str] = None

class PatientResponse(PatientBase):
    id: UUID
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class PatientDeletedResponse(BaseModel):
    message: str
    patient: PatientResponse
