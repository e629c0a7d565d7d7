'''
Static enums mirroring the ENUM types declared on the database columns.
'''
import enum


class ListableEnum(str, enum.Enum):
    """String-valued enum; members compare equal to their stored values."""


class UserRole(ListableEnum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AppointmentStatusEnum(ListableEnum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationTypeEnum(ListableEnum):
    UPCOMING_CLASS = "upcoming_class"
    ASSIGNMENT_DUE = "assignment_due"
    CLASS_REMINDER = "class_reminder"


class WeekDayEnum(ListableEnum):
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"

    @classmethod
    def from_date_weekday(cls, weekday: int) -> "WeekDayEnum":
        return list(cls)[weekday]
