from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from app.core.logger import logger
from app.core.utils import utc_now
from app.db.models import Appointment, AppointmentStatus, Room
from app.schemas.room import RoomCreate, RoomStats, RoomUpdate

# Appointments that still need the room; a room holding any of these cannot be removed
PENDING_STATUSES = [
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.IN_PROGRESS,
]

class RoomService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _name_taken(self, name: str, exclude_id: UUID | None = None) -> bool:
        stmt = select(Room).where(Room.name == name)
        if exclude_id:
            stmt = stmt.where(Room.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first() is not None

    async def _count_appointments(self, room_id: UUID, statuses: list[AppointmentStatus] | None = None) -> int:
        stmt = select(func.count(Appointment.id)).where(Appointment.room_id == room_id)
        if statuses:
            stmt = stmt.where(Appointment.status.in_(statuses))
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def create_room(self, data: RoomCreate) -> Room:
        if await self._name_taken(data.name):
            raise HTTPException(status_code=409, detail="A room with that name already exists")

        room = Room(**data.model_dump())
        self.session.add(room)
        await self.session.commit()
        await self.session.refresh(room)
        return room

    async def get_rooms(self) -> List[Room]:
        stmt = select(Room).where(Room.is_active == True).order_by(Room.name)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_room(self, room_id: UUID) -> Room:
        room = await self.session.get(Room, room_id)
        if not room:
            raise HTTPException(status_code=404, detail="Room not found")
        return room

    async def update_room(self, room_id: UUID, data: RoomUpdate) -> Room:
        room = await self.get_room(room_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data and await self._name_taken(update_data["name"], exclude_id=room_id):
            raise HTTPException(status_code=409, detail="Another room with that name already exists")

        for key, value in update_data.items():
            setattr(room, key, value)
        room.updated_at = utc_now()

        self.session.add(room)
        await self.session.commit()
        await self.session.refresh(room)
        return room

    async def delete_room(self, room_id: UUID) -> dict:
        room = await self.get_room(room_id)

        pending = await self._count_appointments(room_id, PENDING_STATUSES)
        if pending:
            raise HTTPException(
                status_code=409,
                detail=f"Room has {pending} pending appointments; cancel or move them first"
            )

        # Rooms with history are kept (deactivated) so past appointments still resolve
        if await self._count_appointments(room_id):
            room.is_active = False
            room.updated_at = utc_now()
            self.session.add(room)
            await self.session.commit()
            logger.info(f"Room {room_id} deactivated")
            return {"message": "Room deactivated"}

        await self.session.delete(room)
        await self.session.commit()
        logger.info(f"Room {room_id} deleted")
        return {"message": "Room deleted"}

    async def get_stats(self) -> RoomStats:
        total = (await self.session.execute(select(func.count(Room.id)))).scalar() or 0
        active = (await self.session.execute(
            select(func.count(Room.id)).where(Room.is_active == True)
        )).scalar() or 0
        return RoomStats(total=total, active=active, inactive=total - active)
