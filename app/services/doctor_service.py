from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.models import Doctor
from app.schemas.doctor import DoctorCreate, DoctorUpdate

class DoctorService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_doctor(self, data: DoctorCreate) -> Doctor:
        doctor = Doctor(**data.model_dump())
        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        return doctor

    async def get_doctors(self, active_only: bool = False) -> List[Doctor]:
        query = select(Doctor)
        if active_only:
            query = query.where(Doctor.is_active == True)
        query = query.order_by(Doctor.name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_doctor(self, doctor_id: UUID) -> Doctor:
        doctor = await self.session.get(Doctor, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    async def update_doctor(self, doctor_id: UUID, data: DoctorUpdate) -> Doctor:
        doctor = await self.get_doctor(doctor_id)

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(doctor, key, value)

        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        return doctor
