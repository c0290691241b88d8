from fastapi import APIRouter, Depends
from typing import List
from uuid import UUID

from app.api.deps import get_room_service
from app.schemas.room import RoomCreate, RoomResponse, RoomStats, RoomUpdate
from app.services.room_service import RoomService

router = APIRouter()

@router.post("", response_model=RoomResponse, status_code=201)
async def create_room(
    room_data: RoomCreate,
    service: RoomService = Depends(get_room_service)
):
    return await service.create_room(room_data)

@router.get("", response_model=List[RoomResponse])
async def read_rooms(service: RoomService = Depends(get_room_service)):
    return await service.get_rooms()

@router.get("/stats", response_model=RoomStats)
async def read_room_stats(service: RoomService = Depends(get_room_service)):
    return await service.get_stats()

@router.get("/{room_id}", response_model=RoomResponse)
async def read_room(room_id: UUID, service: RoomService = Depends(get_room_service)):
    return await service.get_room(room_id)

@router.patch("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: UUID,
    room_data: RoomUpdate,
    service: RoomService = Depends(get_room_service)
):
    return await service.update_room(room_id, room_data)

@router.delete("/{room_id}")
async def delete_room(room_id: UUID, service: RoomService = Depends(get_room_service)):
    return await service.delete_room(room_id)
