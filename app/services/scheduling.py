"""
Scheduling rules for appointments: conflict detection and free-slot generation.

Everything in this module is pure. Callers load the appointments that matter
(same day, same room or doctor) and pass them in; nothing here touches the
database, the clock or the settings object.

Intervals are half-open, [start, end): an appointment that ends at 10:30 does
not collide with one that starts at 10:30.
"""
from datetime import date as date_type, datetime, time, timedelta
from typing import Iterable, Iterator, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.db.models.appointment import Appointment, AppointmentStatus

DEFAULT_TREATMENT_DURATION_MINUTES = 60
DEFAULT_STATUS_COLOR = "#2196F3"

STATUS_COLORS = {
    AppointmentStatus.SCHEDULED: "#2196F3",    # blue
    AppointmentStatus.CONFIRMED: "#4CAF50",    # green
    AppointmentStatus.IN_PROGRESS: "#FF9800",  # orange
    AppointmentStatus.COMPLETED: "#9E9E9E",    # grey
    AppointmentStatus.CANCELLED: "#F44336",    # red
    AppointmentStatus.NO_SHOW: "#795548",      # brown
}

# Whether an appointment in this status still occupies its room and doctor
BLOCKING_STATUSES = {
    AppointmentStatus.SCHEDULED: True,
    AppointmentStatus.CONFIRMED: True,
    AppointmentStatus.IN_PROGRESS: True,
    AppointmentStatus.COMPLETED: True,
    AppointmentStatus.NO_SHOW: True,
    AppointmentStatus.CANCELLED: False,
}


class WorkingHoursConfig(BaseModel):
    """Clinic opening window and the step between candidate slot starts."""

    model_config = ConfigDict(frozen=True)

    start_hour: int = Field(default=9, ge=0, le=23)
    end_hour: int = Field(default=20, ge=1, le=24)
    slot_granularity_minutes: int = Field(default=30, gt=0)

    @model_validator(mode="after")
    def check_window(self) -> "WorkingHoursConfig":
        if self.start_hour >= self.end_hour:
            raise ValueError("start_hour must be before end_hour")
        return self

    @classmethod
    def from_settings(cls) -> "WorkingHoursConfig":
        from app.core.config import settings

        return cls(
            start_hour=settings.WORKING_HOURS_START,
            end_hour=settings.WORKING_HOURS_END,
            slot_granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
        )


class SchedulingCandidate(BaseModel):
    room_id: UUID
    doctor_id: UUID
    date: date_type
    start_time: datetime
    end_time: datetime


class Slot(BaseModel):
    start: datetime
    end: datetime
    display: str


def ensure_valid_interval(start: datetime, end: datetime) -> None:
    """Boundary precondition for anything that becomes an appointment interval."""
    if end <= start:
        raise ValueError("end_time must be after start_time")


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def blocks_schedule(status: Union[AppointmentStatus, str]) -> bool:
    # AppointmentStatus() rejects values outside the enum instead of guessing
    return BLOCKING_STATUSES[AppointmentStatus(status)]


def status_color(status: Union[AppointmentStatus, str, None]) -> str:
    try:
        return STATUS_COLORS[AppointmentStatus(status)]
    except ValueError:
        return DEFAULT_STATUS_COLOR


def effective_duration(minutes: Optional[int]) -> int:
    if not minutes or minutes <= 0:
        return DEFAULT_TREATMENT_DURATION_MINUTES
    return minutes


def format_slot_label(start: datetime, end: datetime) -> str:
    return f"{start:%H:%M} - {end:%H:%M}"


def is_in_conflict_scope(
    candidate: SchedulingCandidate,
    appointment: Appointment,
    exclude_id: Optional[UUID] = None,
) -> bool:
    """
    An existing appointment can collide with the candidate when it is still
    active and uses the same room or the same doctor.
    """
    if exclude_id is not None and appointment.id == exclude_id:
        return False
    if not blocks_schedule(appointment.status):
        return False
    return appointment.room_id == candidate.room_id or appointment.doctor_id == candidate.doctor_id


def _iter_conflicts(
    candidate: SchedulingCandidate,
    existing: Iterable[Appointment],
    exclude_id: Optional[UUID],
) -> Iterator[Appointment]:
    for appointment in existing:
        if not is_in_conflict_scope(candidate, appointment, exclude_id):
            continue
        if intervals_overlap(
            candidate.start_time, candidate.end_time,
            appointment.start_time, appointment.end_time,
        ):
            yield appointment


def find_conflicts(
    candidate: SchedulingCandidate,
    existing: Iterable[Appointment],
    exclude_id: Optional[UUID] = None,
) -> List[Appointment]:
    conflicts = _iter_conflicts(candidate, existing, exclude_id)
    return sorted(conflicts, key=lambda appointment: appointment.start_time)


def has_conflict(
    candidate: SchedulingCandidate,
    existing: Iterable[Appointment],
    exclude_id: Optional[UUID] = None,
) -> bool:
    return any(True for _ in _iter_conflicts(candidate, existing, exclude_id))


def generate_available_slots(
    day: date_type,
    doctor_id: UUID,
    treatment_duration_minutes: Optional[int],
    existing: Iterable[Appointment],
    working_hours: Optional[WorkingHoursConfig] = None,
) -> List[Slot]:
    """
    Free slots for a doctor's day, in ascending order.

    `existing` holds the appointments of `day`. Active ones belonging to
    `doctor_id` are busy time; rows for other doctors are ignored. Candidate
    starts step by the granularity from opening time while they are before
    closing time.

    A slot is rejected when its end hour is past `end_hour`. Only the hour is
    compared, so with end_hour=20 a slot ending at 20:30 is still offered.
    """
    working_hours = working_hours or WorkingHoursConfig()
    duration = timedelta(minutes=effective_duration(treatment_duration_minutes))
    step = timedelta(minutes=working_hours.slot_granularity_minutes)

    midnight = datetime.combine(day, time.min)
    opening = midnight + timedelta(hours=working_hours.start_hour)
    closing = midnight + timedelta(hours=working_hours.end_hour)

    busy = [
        (appointment.start_time, appointment.end_time)
        for appointment in existing
        if appointment.doctor_id == doctor_id and blocks_schedule(appointment.status)
    ]

    slots = []
    slot_start = opening
    while slot_start < closing:
        slot_end = slot_start + duration
        is_free = not any(
            intervals_overlap(slot_start, slot_end, busy_start, busy_end)
            for busy_start, busy_end in busy
        )
        if is_free and slot_end.hour <= working_hours.end_hour:
            slots.append(Slot(
                start=slot_start,
                end=slot_end,
                display=format_slot_label(slot_start, slot_end),
            ))
        slot_start += step

    return slots
