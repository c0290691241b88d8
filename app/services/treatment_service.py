import math
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlmodel import func, or_, select

from app.core.logger import logger
from app.db.models import Appointment, Treatment
from app.schemas.treatment import TreatmentCreate, TreatmentPage, TreatmentResponse, TreatmentUpdate

class TreatmentService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _code_taken(self, code: int, exclude_id: Optional[UUID] = None) -> bool:
        stmt = select(Treatment).where(Treatment.code == code)
        if exclude_id:
            stmt = stmt.where(Treatment.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first() is not None

    async def _next_code(self) -> int:
        result = await self.session.execute(select(func.max(Treatment.code)))
        return (result.scalar() or 0) + 1

    async def create_treatment(self, data: TreatmentCreate) -> Treatment:
        if data.code is not None and await self._code_taken(data.code):
            raise HTTPException(status_code=409, detail="A treatment with that code already exists")

        treatment = Treatment(**data.model_dump(exclude={"code"}))
        treatment.code = data.code if data.code is not None else await self._next_code()

        self.session.add(treatment)
        await self.session.commit()
        await self.session.refresh(treatment)
        return treatment

    async def get_treatments(
        self,
        search: Optional[str] = None,
        active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> TreatmentPage:
        filters = []
        if search:
            pattern = f"%{search.strip().lower()}%"
            filters.append(or_(
                func.lower(Treatment.name).like(pattern),
                func.lower(Treatment.description).like(pattern)
            ))
        if active is not None:
            filters.append(Treatment.is_active == active)

        count_stmt = select(func.count(Treatment.id)).where(*filters)
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Treatment)
            .where(*filters)
            .order_by(Treatment.name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        treatments = result.scalars().all()

        total_pages = math.ceil(total / limit)
        return TreatmentPage(
            data=[TreatmentResponse.model_validate(t) for t in treatments],
            total=total,
            page=page,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )

    async def get_treatment(self, treatment_id: UUID) -> Treatment:
        treatment = await self.session.get(Treatment, treatment_id)
        if not treatment:
            raise HTTPException(status_code=404, detail="Treatment not found")
        return treatment

    async def update_treatment(self, treatment_id: UUID, data: TreatmentUpdate) -> Treatment:
        treatment = await self.get_treatment(treatment_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("code") is not None and await self._code_taken(update_data["code"], exclude_id=treatment_id):
            raise HTTPException(status_code=409, detail="Another treatment with that code already exists")

        for key, value in update_data.items():
            setattr(treatment, key, value)

        self.session.add(treatment)
        await self.session.commit()
        await self.session.refresh(treatment)
        return treatment

    async def toggle_active(self, treatment_id: UUID) -> Treatment:
        treatment = await self.get_treatment(treatment_id)
        treatment.is_active = not treatment.is_active
        self.session.add(treatment)
        await self.session.commit()
        await self.session.refresh(treatment)
        return treatment

    async def delete_treatment(self, treatment_id: UUID) -> dict:
        treatment = await self.get_treatment(treatment_id)

        # Appointments outlive the treatment; they just lose the reference
        await self.session.execute(
            update(Appointment)
            .where(Appointment.treatment_id == treatment_id)
            .values(treatment_id=None)
        )
        await self.session.delete(treatment)
        await self.session.commit()
        logger.info(f"Treatment {treatment_id} deleted")
        return {"message": "Treatment deleted"}
