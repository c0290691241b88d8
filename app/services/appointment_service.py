from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select, or_
from uuid import UUID
from datetime import date, datetime
from typing import List, Optional
from fastapi import HTTPException

from app.core.logger import logger
from app.core.utils import to_naive_utc, utc_now, view_range
from app.db.models import Appointment, AppointmentStatus, Doctor, Patient, Room, Treatment
from app.schemas.appointment import AppointmentCreate, AppointmentUpdate, AvailabilityCheck
from app.services.scheduling import (
    SchedulingCandidate,
    Slot,
    WorkingHoursConfig,
    blocks_schedule,
    ensure_valid_interval,
    find_conflicts,
    generate_available_slots,
)

SCHEDULE_FIELDS = {"date", "start_time", "end_time", "room_id", "doctor_id"}
NULLABLE_FIELDS = {"treatment_id", "observations", "confirmation_date"}

class AppointmentService:
    def __init__(self, session: AsyncSession, locks, working_hours: Optional[WorkingHoursConfig] = None):
        self.session = session
        self.locks = locks
        self.working_hours = working_hours or WorkingHoursConfig.from_settings()

    async def _require(self, model, entity_id: UUID, label: str):
        entity = await self.session.get(model, entity_id)
        if not entity:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return entity

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        stmt = (
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .options(selectinload(Appointment.patient), selectinload(Appointment.treatment))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        appointment = result.scalars().first()
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    async def get_active_appointments_on_date(
        self,
        day: date,
        room_id: Optional[UUID] = None,
        doctor_id: Optional[UUID] = None,
    ) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.date == day,
            Appointment.status != AppointmentStatus.CANCELLED
        )
        resource_filters = []
        if room_id:
            resource_filters.append(Appointment.room_id == room_id)
        if doctor_id:
            resource_filters.append(Appointment.doctor_id == doctor_id)
        if resource_filters:
            stmt = stmt.where(or_(*resource_filters))

        stmt = stmt.order_by(Appointment.start_time)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def is_available(self, candidate: SchedulingCandidate, exclude_id: Optional[UUID] = None) -> bool:
        existing = await self.get_active_appointments_on_date(
            candidate.date, room_id=candidate.room_id, doctor_id=candidate.doctor_id
        )
        conflicts = find_conflicts(candidate, existing, exclude_id)
        if conflicts:
            logger.info(
                f"Slot {candidate.start_time:%Y-%m-%d %H:%M}-{candidate.end_time:%H:%M} "
                f"room={candidate.room_id} doctor={candidate.doctor_id} "
                f"conflicts with {[str(c.id) for c in conflicts]}"
            )
        return not conflicts

    async def check_availability(self, data: AvailabilityCheck) -> bool:
        candidate = SchedulingCandidate(
            room_id=data.room_id,
            doctor_id=data.doctor_id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time
        )
        return await self.is_available(candidate, exclude_id=data.exclude_appointment_id)

    async def create_appointment(self, data: AppointmentCreate) -> Appointment:
        # 1. Validate references
        await self._require(Patient, data.patient_id, "Patient")
        await self._require(Doctor, data.doctor_id, "Doctor")
        await self._require(Room, data.room_id, "Room")
        if data.treatment_id:
            await self._require(Treatment, data.treatment_id, "Treatment")

        candidate = SchedulingCandidate(
            room_id=data.room_id,
            doctor_id=data.doctor_id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time
        )

        # 2. Check and insert while holding the room/doctor locks for the day
        async with self.locks.booking_lock(data.room_id, data.doctor_id, data.date):
            if blocks_schedule(data.status) and not await self.is_available(candidate):
                raise HTTPException(status_code=400, detail="The selected time is not available")

            appointment = Appointment(**data.model_dump())
            self.session.add(appointment)
            await self.session.commit()

        logger.info(
            f"Appointment {appointment.id} booked: room={appointment.room_id} "
            f"doctor={appointment.doctor_id} {appointment.start_time:%Y-%m-%d %H:%M}-{appointment.end_time:%H:%M}"
        )
        return await self.get_appointment(appointment.id)

    def _merge_schedule(self, appointment: Appointment, changes: dict) -> dict:
        start = changes.get("start_time", appointment.start_time)
        end = changes.get("end_time", appointment.end_time)

        if "date" in changes and "start_time" not in changes:
            # Moving to another day keeps the time of day and the duration
            length = end - start
            start = datetime.combine(changes["date"], appointment.start_time.time())
            if "end_time" not in changes:
                end = start + length

        day = changes.get("date") or start.date()

        try:
            ensure_valid_interval(start, end)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        if day != start.date():
            raise HTTPException(status_code=400, detail="date must be the calendar day of start_time")

        return {
            "date": day,
            "start_time": start,
            "end_time": end,
            "room_id": changes.get("room_id", appointment.room_id),
            "doctor_id": changes.get("doctor_id", appointment.doctor_id),
        }

    async def _commit_changes(self, appointment: Appointment, changes: dict) -> None:
        for key, value in changes.items():
            setattr(appointment, key, value)
        appointment.updated_at = utc_now()
        self.session.add(appointment)
        await self.session.commit()

    async def update_appointment(self, appointment_id: UUID, data: AppointmentUpdate) -> Appointment:
        appointment = await self.get_appointment(appointment_id)

        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        for key in ("start_time", "end_time", "confirmation_date"):
            if changes.get(key) is not None:
                changes[key] = to_naive_utc(changes[key])

        if changes.get("patient_id"):
            await self._require(Patient, changes["patient_id"], "Patient")
        if changes.get("treatment_id"):
            await self._require(Treatment, changes["treatment_id"], "Treatment")
        if changes.get("room_id"):
            await self._require(Room, changes["room_id"], "Room")
        if changes.get("doctor_id"):
            await self._require(Doctor, changes["doctor_id"], "Doctor")

        new_status = changes.get("status") or appointment.status
        reactivating = not blocks_schedule(appointment.status) and blocks_schedule(new_status)
        rescheduling = bool(SCHEDULE_FIELDS & changes.keys())

        if not (rescheduling or reactivating) or not blocks_schedule(new_status):
            if rescheduling:
                changes.update(self._merge_schedule(appointment, changes))
            await self._commit_changes(appointment, changes)
            logger.info(f"Appointment {appointment_id} updated: {sorted(changes)}")
            return await self.get_appointment(appointment_id)

        schedule = self._merge_schedule(appointment, changes)
        candidate = SchedulingCandidate(**schedule)

        async with self.locks.booking_lock(candidate.room_id, candidate.doctor_id, candidate.date):
            if not await self.is_available(candidate, exclude_id=appointment_id):
                raise HTTPException(status_code=400, detail="The new time is not available")
            changes.update(schedule)
            await self._commit_changes(appointment, changes)

        logger.info(
            f"Appointment {appointment_id} rescheduled: room={candidate.room_id} "
            f"doctor={candidate.doctor_id} {candidate.start_time:%Y-%m-%d %H:%M}-{candidate.end_time:%H:%M}"
        )
        return await self.get_appointment(appointment_id)

    async def confirm_appointment(self, appointment_id: UUID) -> Appointment:
        return await self.update_appointment(appointment_id, AppointmentUpdate(
            status=AppointmentStatus.CONFIRMED,
            confirmed=True,
            confirmation_date=utc_now()
        ))

    async def cancel_appointment(self, appointment_id: UUID, reason: Optional[str] = None) -> Appointment:
        fields = {"status": AppointmentStatus.CANCELLED}
        if reason:
            fields["observations"] = reason
        return await self.update_appointment(appointment_id, AppointmentUpdate(**fields))

    async def mark_no_show(self, appointment_id: UUID) -> Appointment:
        return await self.update_appointment(appointment_id, AppointmentUpdate(status=AppointmentStatus.NO_SHOW))

    async def delete_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = await self.get_appointment(appointment_id)
        if appointment.status == AppointmentStatus.COMPLETED:
            raise HTTPException(status_code=400, detail="Completed appointments cannot be deleted")

        await self.session.delete(appointment)
        await self.session.commit()
        logger.info(f"Appointment {appointment_id} deleted")
        return appointment

    async def list_appointments(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        patient_id: Optional[UUID] = None,
        doctor_id: Optional[UUID] = None,
        room_id: Optional[UUID] = None,
        status: Optional[AppointmentStatus] = None,
        view: Optional[str] = None,
    ) -> List[Appointment]:
        if view:
            start_date, end_date = view_range(view, date.today())

        stmt = select(Appointment).options(
            selectinload(Appointment.patient), selectinload(Appointment.treatment)
        )
        if start_date:
            stmt = stmt.where(Appointment.date >= start_date)
        if end_date:
            stmt = stmt.where(Appointment.date <= end_date)
        if patient_id:
            stmt = stmt.where(Appointment.patient_id == patient_id)
        if doctor_id:
            stmt = stmt.where(Appointment.doctor_id == doctor_id)
        if room_id:
            stmt = stmt.where(Appointment.room_id == room_id)
        if status:
            stmt = stmt.where(Appointment.status == status)

        stmt = stmt.order_by(Appointment.date, Appointment.start_time)
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().all()

    async def get_today_appointments(self) -> List[Appointment]:
        today = date.today()
        return await self.list_appointments(start_date=today, end_date=today)

    async def get_appointments_by_patient(self, patient_id: UUID) -> List[Appointment]:
        return await self.list_appointments(patient_id=patient_id)

    async def get_available_slots(self, day: date, doctor_id: UUID, treatment_id: UUID) -> List[Slot]:
        treatment = await self._require(Treatment, treatment_id, "Treatment")

        stmt = select(Appointment).where(
            Appointment.date == day,
            Appointment.doctor_id == doctor_id,
            Appointment.status != AppointmentStatus.CANCELLED
        ).order_by(Appointment.start_time)
        result = await self.session.execute(stmt)
        existing = result.scalars().all()

        return generate_available_slots(day, doctor_id, treatment.duration, existing, self.working_hours)
