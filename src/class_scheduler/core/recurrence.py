'''
Expansion of a class's weekly recurrence pattern into concrete sessions.
'''
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from ..database.db_enums import WeekDayEnum


@dataclass(frozen=True)
class Occurrence:
    """One concrete session derived from the recurrence pattern."""
    date: date
    time: str
    duration: int

    @property
    def starts_at(self) -> datetime:
        return session_start(self.date, self.time)


def parse_hhmm(value: str) -> time:
    """Parses "HH:MM" into a time, raising ValueError on anything else."""
    hours, minutes = value.split(':')
    return time(int(hours), int(minutes))


def normalize_hhmm(value: str) -> str:
    """Canonical zero-padded form of a time, e.g. "9:05" -> "09:05"."""
    parsed = parse_hhmm(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def session_start(day: date, hhmm: str) -> datetime:
    """Combines a date and an "HH:MM" string into a UTC datetime."""
    return datetime.combine(day, parse_hhmm(hhmm), tzinfo=timezone.utc)


def expand_recurrence(
    start_date: date,
    end_date: date,
    week_days: list[str],
    time_per_day: dict[str, str],
    duration_per_day: dict[str, int],
) -> list[Occurrence]:
    """
    Walks every date in [start_date, end_date] and yields an occurrence for
    each one whose weekday is declared and has both a time and a duration.
    """
    declared = {WeekDayEnum(day) for day in week_days}
    occurrences = []
    current = start_date
    while current <= end_date:
        weekday = WeekDayEnum.from_date_weekday(current.weekday())
        if weekday in declared:
            hhmm = time_per_day.get(weekday.value)
            duration = duration_per_day.get(weekday.value)
            if hhmm and duration:
                occurrences.append(Occurrence(date=current, time=hhmm, duration=int(duration)))
        current += timedelta(days=1)
    return occurrences
