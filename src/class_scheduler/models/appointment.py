'''

'''
import datetime as dt
from typing import Optional

from pydantic import Field, PositiveInt, field_validator

from ..core.recurrence import normalize_hhmm
from ..database.db_enums import AppointmentStatusEnum
from .base import ApiModel


class AppointmentCreate(ApiModel):
    """
    Payload for POST /api/appointments.
    The meeting link and appointment identifier are generated by the service.
    """
    class_id: int
    date: dt.date
    time: str
    duration: PositiveInt

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        try:
            return normalize_hhmm(value)
        except ValueError:
            raise ValueError(f"Invalid time '{value}', expected HH:MM")


class AttendanceUpdate(ApiModel):
    """Partial update of the two attendance flags."""
    student_attendance: Optional[bool] = None
    teacher_attendance: Optional[bool] = None


class AppointmentUpdate(ApiModel):
    """
    Per-side notes and ratings. Which fields a caller may set depends on
    their role; the service enforces it.
    """
    teacher_note: Optional[str] = None
    student_note: Optional[str] = None
    teacher_rating: Optional[int] = Field(None, ge=1, le=5)
    student_rating: Optional[int] = Field(None, ge=1, le=5)
    assignment: Optional[str] = None
    status: Optional[AppointmentStatusEnum] = None


class AppointmentRead(ApiModel):
    id: int
    appointment_id: str
    class_id: int
    date: dt.date
    time: str
    duration: int
    teacher_note: Optional[str] = None
    student_note: Optional[str] = None
    student_attendance: Optional[bool] = None
    teacher_attendance: Optional[bool] = None
    assignment: Optional[str] = None
    student_rating: Optional[int] = None
    teacher_rating: Optional[int] = None
    meet_link: Optional[str] = None
    status: AppointmentStatusEnum
