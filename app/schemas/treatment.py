from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime

class TreatmentBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    vat_percentage: float = Field(default=21, ge=0, le=100)
    duration: Optional[int] = Field(default=None, ge=5, le=480)
    is_active: bool = True

class TreatmentCreate(TreatmentBase):
    code: Optional[int] = Field(default=None, ge=1)

class TreatmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    code: Optional[int] = Field(default=None, ge=1)
    price: Optional[float] = Field(default=None, ge=0)
    vat_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    duration: Optional[int] = Field(default=None, ge=5, le=480)
    is_active: Optional[bool] = None

class TreatmentResponse(TreatmentBase):
    id: UUID
    code: int
    created_at: datetime

    class Config:
        from_attributes = True

class TreatmentPage(BaseModel):
    data: List[TreatmentResponse]
    total: int
    page: int
    total_pages: int
    has_next: bool
    has_previous: bool
