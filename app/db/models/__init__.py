from sqlmodel import SQLModel
from .doctor import Doctor
from .room import Room
from .treatment import Treatment
from .patient import Patient
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "SQLModel",
    "Doctor",
    "Room",
    "Treatment",
    "Patient",
    "Appointment",
    "AppointmentStatus",
]
