from collections import Counter
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from app.db.models import Appointment, AppointmentStatus, Treatment
from app.schemas.history import (
    HistoryEntry,
    PatientHistorySummary,
    PatientStatistics,
    TreatmentHistory,
    TreatmentSessions,
)
from app.services.patient_service import PatientService

DEFAULT_TIMELINE_LIMIT = 50
UPCOMING_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)

def to_entry(appointment: Appointment) -> HistoryEntry:
    treatment = appointment.treatment
    return HistoryEntry(
        id=appointment.id,
        date=appointment.date,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        status=appointment.status,
        confirmed=appointment.confirmed,
        observations=appointment.observations,
        treatment_id=appointment.treatment_id,
        treatment_name=treatment.name if treatment else None,
        doctor_id=appointment.doctor_id,
        doctor_name=appointment.doctor.name,
        room_id=appointment.room_id,
        room_name=appointment.room.name
    )

class HistoryService:
    """Read-only views over a patient's appointments, newest first."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _patient_appointments(
        self,
        patient_id: UUID,
        treatment_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Appointment]:
        await PatientService(self.session).get_patient(patient_id)

        stmt = (
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .options(
                selectinload(Appointment.treatment),
                selectinload(Appointment.doctor),
                selectinload(Appointment.room)
            )
            .order_by(Appointment.date.desc(), Appointment.start_time.desc())
        )
        if treatment_id:
            stmt = stmt.where(Appointment.treatment_id == treatment_id)
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_treatment_summary(self, patient_id: UUID) -> PatientHistorySummary:
        appointments = await self._patient_appointments(patient_id)

        groups = {}
        for appointment in appointments:
            treatment = appointment.treatment
            # Appointments whose treatment was deleted only count in the total
            if treatment is None:
                continue
            group = groups.get(treatment.id)
            if group is None:
                group = groups[treatment.id] = TreatmentHistory(
                    treatment_id=treatment.id,
                    treatment_name=treatment.name,
                    treatment_code=treatment.code,
                    total_sessions=0,
                    completed_sessions=0,
                    cancelled_sessions=0,
                    first_session=appointment.date,
                    last_session=appointment.date,
                    appointments=[]
                )
            group.total_sessions += 1
            if appointment.status == AppointmentStatus.COMPLETED:
                group.completed_sessions += 1
            elif appointment.status == AppointmentStatus.CANCELLED:
                group.cancelled_sessions += 1
            group.first_session = min(group.first_session, appointment.date)
            group.last_session = max(group.last_session, appointment.date)
            group.appointments.append(to_entry(appointment))

        treatments = sorted(groups.values(), key=lambda g: g.last_session, reverse=True)
        return PatientHistorySummary(
            patient_id=patient_id,
            total_treatment_types=len(treatments),
            total_sessions=len(appointments),
            treatments=treatments
        )

    async def get_treatment_sessions(self, patient_id: UUID, treatment_id: UUID) -> TreatmentSessions:
        appointments = await self._patient_appointments(patient_id, treatment_id=treatment_id)
        treatment = await self.session.get(Treatment, treatment_id)
        return TreatmentSessions(
            treatment_id=treatment_id,
            treatment_name=treatment.name if treatment else "Unknown",
            total_sessions=len(appointments),
            appointments=[to_entry(a) for a in appointments]
        )

    async def get_timeline(self, patient_id: UUID, limit: int = DEFAULT_TIMELINE_LIMIT) -> List[HistoryEntry]:
        appointments = await self._patient_appointments(patient_id, limit=limit)
        return [to_entry(a) for a in appointments]

    async def get_statistics(self, patient_id: UUID) -> PatientStatistics:
        appointments = await self._patient_appointments(patient_id)
        statuses = Counter(a.status for a in appointments)
        treatments = Counter(a.treatment.name for a in appointments if a.treatment)
        today = date.today()
        dates = [a.date for a in appointments]

        most_frequent = treatments.most_common(1)
        return PatientStatistics(
            total_appointments=len(appointments),
            completed_appointments=statuses[AppointmentStatus.COMPLETED],
            cancelled_appointments=statuses[AppointmentStatus.CANCELLED],
            no_show_appointments=statuses[AppointmentStatus.NO_SHOW],
            upcoming_appointments=sum(
                1 for a in appointments if a.status in UPCOMING_STATUSES and a.date > today
            ),
            first_appointment=min(dates) if dates else None,
            last_appointment=max(dates) if dates else None,
            most_frequent_treatment=most_frequent[0][0] if most_frequent else None,
            treatment_types=len(treatments)
        )
