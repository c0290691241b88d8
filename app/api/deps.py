from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis import RedisClient, redis_client
from app.db.session import get_session
from app.services.appointment_service import AppointmentService
from app.services.doctor_service import DoctorService
from app.services.history_service import HistoryService
from app.services.patient_service import PatientService
from app.services.room_service import RoomService
from app.services.treatment_service import TreatmentService

def get_booking_locks() -> RedisClient:
    return redis_client

async def get_appointment_service(
    session: AsyncSession = Depends(get_session),
    locks: RedisClient = Depends(get_booking_locks)
) -> AppointmentService:
    return AppointmentService(session, locks)

async def get_room_service(session: AsyncSession = Depends(get_session)) -> RoomService:
    return RoomService(session)

async def get_treatment_service(session: AsyncSession = Depends(get_session)) -> TreatmentService:
    return TreatmentService(session)

async def get_patient_service(session: AsyncSession = Depends(get_session)) -> PatientService:
    return PatientService(session)

async def get_doctor_service(session: AsyncSession = Depends(get_session)) -> DoctorService:
    return DoctorService(session)

async def get_history_service(session: AsyncSession = Depends(get_session)) -> HistoryService:
    return HistoryService(session)
