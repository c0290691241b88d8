from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

class DoctorBase(BaseModel):
    name: str
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class DoctorCreate(DoctorBase):
    pass

class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

class DoctorResponse(DoctorBase):
    id: UUID
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
