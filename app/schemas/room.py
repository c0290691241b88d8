from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    capacity: int = Field(default=2, ge=1)

class RoomCreate(RoomBase):
    pass

class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)

class RoomResponse(RoomBase):
    id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class RoomStats(BaseModel):
    total: int
    active: int
    inactive: int
