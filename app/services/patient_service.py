import re
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, or_, select

from app.core.logger import logger
from app.core.utils import utc_now
from app.db.models import Appointment, AppointmentStatus, Patient
from app.schemas.patient import PatientCreate, PatientUpdate

PHONE_SEARCH_LIMIT = 10

class PatientService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_patient_by_document(self, document_number: str) -> Patient | None:
        stmt = select(Patient).where(Patient.document_number == document_number)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_patient(self, data: PatientCreate) -> Patient:
        if await self.get_patient_by_document(data.document_number):
            raise HTTPException(status_code=409, detail="A patient with this document already exists")

        patient = Patient(**data.model_dump())
        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        return patient

    async def get_patients(self, search: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Patient]:
        query = select(Patient).where(Patient.is_active == True)
        if search:
            term = search.strip()
            pattern = f"%{term.lower()}%"
            conditions = [
                func.lower(Patient.first_name).like(pattern),
                func.lower(Patient.last_name).like(pattern),
                func.lower(Patient.document_number).like(pattern),
                func.lower(Patient.email).like(pattern),
                Patient.phone.like(f"%{term}%"),
            ]
            query = query.where(or_(*conditions))
        query = query.order_by(Patient.last_name, Patient.first_name).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def search_by_phone(self, phone: str) -> List[Patient]:
        digits = re.sub(r"\D", "", phone)
        if not digits:
            raise HTTPException(status_code=400, detail="Phone search needs at least one digit")

        query = (
            select(Patient)
            .where(Patient.is_active == True, Patient.phone.contains(digits))
            .order_by(Patient.last_name, Patient.first_name)
            .limit(PHONE_SEARCH_LIMIT)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_patient(self, patient_id: UUID) -> Patient:
        patient = await self.session.get(Patient, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient

    async def update_patient(self, patient_id: UUID, data: PatientUpdate) -> Patient:
        patient = await self.get_patient(patient_id)

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(patient, key, value)

        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        return patient

    async def delete_patient(self, patient_id: UUID) -> Patient:
        """
        Deactivate a patient. Their appointment history is kept, so patients
        with appointments from today onwards must have them cancelled first.
        """
        patient = await self.get_patient(patient_id)

        stmt = select(func.count(Appointment.id)).where(
            Appointment.patient_id == patient_id,
            Appointment.date >= date.today(),
            Appointment.status != AppointmentStatus.CANCELLED
        )
        upcoming = (await self.session.execute(stmt)).scalar() or 0
        if upcoming:
            raise HTTPException(
                status_code=400,
                detail=f"Patient has {upcoming} upcoming appointments and cannot be removed"
            )

        patient.is_active = False
        patient.deleted_at = utc_now()
        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        logger.info(f"Patient {patient_id} deactivated")
        return patient
