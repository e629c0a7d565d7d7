'''
Pydantic models for classes (a subject + teacher + roster + recurrence pattern).
'''
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from pydantic import Field, PositiveInt, field_validator, model_validator

from ..core.recurrence import normalize_hhmm
from ..database.db_enums import WeekDayEnum
from .appointment import AppointmentRead
from .base import ApiModel
from .user import UserSummaryRead


# --- API Write Models (Input) ---

class ClassCreate(ApiModel):
    """
    Payload for POST /api/classes.
    subject_id, teacher_id, start_date and end_date are mandatory; the
    recurrence maps are keyed by weekday (MON..SUN).
    """
    subject_id: int
    teacher_id: int
    student_ids: list[int] = Field(default_factory=list)
    start_date: date
    end_date: date
    week_days: list[WeekDayEnum] = Field(default_factory=list)
    time_per_day: dict[WeekDayEnum, str] = Field(default_factory=dict)
    duration_per_day: dict[WeekDayEnum, PositiveInt] = Field(default_factory=dict)
    custom_hour_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    custom_teacher_salary: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    admin_notes: Optional[str] = None
    teacher_notes: Optional[str] = None
    generate_appointments: bool = False

    @field_validator("time_per_day")
    @classmethod
    def validate_times(cls, value: dict[WeekDayEnum, str]) -> dict[WeekDayEnum, str]:
        normalized = {}
        for day, hhmm in value.items():
            try:
                normalized[day] = normalize_hhmm(hhmm)
            except ValueError:
                raise ValueError(f"Invalid time '{hhmm}' for {day.value}, expected HH:MM")
        return normalized

    @model_validator(mode='after')
    def validate_schedule(self) -> 'ClassCreate':
        """
        Ensures the date range is ordered and that the per-day maps only
        reference declared week days.
        """
        if self.end_date < self.start_date:
            raise ValueError('end_date cannot be before start_date')

        declared = set(self.week_days)
        undeclared = (set(self.time_per_day) | set(self.duration_per_day)) - declared
        if undeclared:
            days = ', '.join(sorted(day.value for day in undeclared))
            raise ValueError(f'time_per_day/duration_per_day reference undeclared week days: {days}')
        return self


class ClassUpdate(ApiModel):
    """
    Payload for PATCH /api/classes/{id}. All fields optional.
    Teachers may only send teacher_notes.
    """
    end_date: Optional[date] = None
    admin_notes: Optional[str] = None
    teacher_notes: Optional[str] = None
    custom_hour_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    custom_teacher_salary: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    is_active: Optional[bool] = None


# --- API Read Models (Output) ---
# The role-specific fields are required (nullable) so a student or teacher
# view can never validate as a richer one.

class ClassRead(ApiModel):
    """A class as seen by an enrolled student: no notes for staff, no prices."""
    id: int
    class_id: str
    subject_id: int
    teacher_id: int
    start_date: date
    end_date: date
    week_days: list[str]
    time_per_day: dict[str, str]
    duration_per_day: dict[str, int]
    teacher_notes: Optional[str] = None
    is_active: bool


class ClassReadForTeacher(ClassRead):
    """Adds the teacher's own pay override."""
    custom_teacher_salary: Optional[Decimal]


class ClassReadForAdmin(ClassReadForTeacher):
    """Full record, including the hour price and the admin notes."""
    custom_hour_price: Optional[Decimal]
    admin_notes: Optional[str]


class ClassDetailFields(ApiModel):
    """
    Read-side join of a class with its subject name, teacher name, roster
    and appointments.
    """
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None
    students: list[UserSummaryRead] = Field(default_factory=list)
    appointments: list[AppointmentRead] = Field(default_factory=list)


class ClassDetailRead(ClassReadForAdmin, ClassDetailFields):
    """Admin detail view; also used for every class in the admin listing."""


class ClassDetailForTeacher(ClassReadForTeacher, ClassDetailFields):
    pass


class ClassDetailForStudent(ClassRead, ClassDetailFields):
    pass


# Most specific first
ClassReadRoleBased = Union[ClassDetailRead, ClassReadForTeacher, ClassRead]
ClassDetailRoleBased = Union[ClassDetailRead, ClassDetailForTeacher, ClassDetailForStudent]
