'''

'''
import secrets
from datetime import date
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import AppointmentStatusEnum, UserRole
from ..models import appointment as appointment_models
from ..core.recurrence import expand_recurrence, session_start
from ..common.exceptions import MeetingCreationError
from ..common.logger import log
from .authorization import authorize, authorize_admin, role_of
from .class_service import ClassService
from .meeting_service import MeetingService
from .notification_service import NotificationService

# Which AppointmentUpdate fields each side may write
TEACHER_FIELDS = {"teacher_note", "teacher_rating", "assignment"}
STUDENT_FIELDS = {"student_note", "student_rating"}


def generate_appointment_id() -> str:
    return f"APT-{secrets.token_hex(6).upper()}"


class AppointmentService:
    """
    Service for appointments: single sessions of a class, each with a
    video-meeting link, attendance flags and per-side notes and ratings.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        class_service: Annotated[ClassService, Depends(ClassService)],
        notification_service: Annotated[NotificationService, Depends(NotificationService)],
        meeting_service: Annotated[MeetingService, Depends(MeetingService)]
    ):
        self.db = db
        self.class_service = class_service
        self.notification_service = notification_service
        self.meeting_service = meeting_service

    # --- Internal Fetchers ---

    async def _get_appointment_internal(self, appointment_pk: int) -> db_models.Appointments:
        """
        Fetches an appointment with its class roster loaded.
        Raises 404 if not found.
        """
        stmt = select(db_models.Appointments).options(
            selectinload(db_models.Appointments.class_).selectinload(db_models.Classes.class_students)
        ).filter(db_models.Appointments.id == appointment_pk)
        result = await self.db.execute(stmt)
        appointment = result.scalars().first()
        if not appointment:
            log.warning(f"Tried to fetch non-existing appointment: {appointment_pk}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found.")
        return appointment

    async def _create_for_class(
        self,
        class_orm: db_models.Classes,
        session_date: date,
        session_time: str,
        duration: int
    ) -> db_models.Appointments:
        """
        Creates the meeting, persists the appointment and notifies the
        class teacher and every enrolled student. Nothing is added to the
        session if the meeting provider fails.
        """
        if not class_orm.subject:
            log.warning(f"Class {class_orm.id} references a missing subject {class_orm.subject_id}.")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found.")

        subject_name = class_orm.subject.name
        try:
            meet_link = await self.meeting_service.create_meeting(
                summary=f"{subject_name} Class",
                start_time=session_start(session_date, session_time),
                duration_minutes=duration,
            )
        except MeetingCreationError as e:
            log.error(f"Meeting creation failed for class {class_orm.id} on {session_date} {session_time}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create the meeting link."
            )

        appointment = db_models.Appointments(
            appointment_id=generate_appointment_id(),
            class_id=class_orm.id,
            date=session_date,
            time=session_time,
            duration=duration,
            meet_link=meet_link,
            status=AppointmentStatusEnum.SCHEDULED.value,
        )
        self.db.add(appointment)
        await self.db.flush()

        recipients = [class_orm.teacher_id] + [link.student_id for link in class_orm.class_students]
        await self.notification_service.notify_appointment_created(appointment, recipients, subject_name)

        log.info(f"Created appointment {appointment.appointment_id} for class {class_orm.id}.")
        return appointment

    # --- Public Read Methods (API-Facing) ---

    async def get_all(self, current_user: db_models.Users) -> list[appointment_models.AppointmentRead]:
        """
        Lists the appointments of every class visible to the caller,
        ordered by date and time.
        """
        log.info(f"User {current_user.id} (Role: {current_user.role}) requesting appointments.")
        try:
            class_ids = await self.class_service.get_visible_class_ids(current_user)
            if not class_ids:
                return []
            stmt = select(db_models.Appointments).filter(
                db_models.Appointments.class_id.in_(class_ids)
            ).order_by(
                db_models.Appointments.date,
                db_models.Appointments.time,
                db_models.Appointments.id
            )
            result = await self.db.execute(stmt)
            return [appointment_models.AppointmentRead.model_validate(a) for a in result.scalars().all()]
        except Exception as e:
            log.error(f"Error listing appointments for user {current_user.id}: {e}", exc_info=True)
            raise

    # --- Public Write Methods (API-Facing) ---

    async def create_appointment(
        self,
        appointment_data: appointment_models.AppointmentCreate,
        current_user: db_models.Users
    ) -> appointment_models.AppointmentRead:
        log.info(f"User {current_user.id} attempting to create an appointment for class {appointment_data.class_id}.")
        authorize_admin(current_user, "create appointments")

        try:
            class_orm = await self.class_service.get_class_internal(appointment_data.class_id)
            appointment = await self._create_for_class(
                class_orm,
                appointment_data.date,
                appointment_data.time,
                appointment_data.duration,
            )
            return appointment_models.AppointmentRead.model_validate(appointment)
        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error creating appointment for class {appointment_data.class_id}: {e}", exc_info=True)
            raise

    async def generate_for_class(
        self,
        class_pk: int,
        current_user: db_models.Users
    ) -> list[appointment_models.AppointmentRead]:
        """
        Expands the class's recurrence pattern over its date range and
        creates every occurrence not already stored (same date and time).
        """
        log.info(f"User {current_user.id} generating appointments for class {class_pk}.")
        authorize_admin(current_user, "generate appointments")

        class_orm = await self.class_service.get_class_internal(class_pk)
        existing = {(a.date, a.time) for a in class_orm.appointments}
        occurrences = expand_recurrence(
            class_orm.start_date,
            class_orm.end_date,
            class_orm.week_days,
            class_orm.time_per_day,
            class_orm.duration_per_day,
        )

        # Calendar events are created as we go; if a later occurrence fails the
        # transaction rolls back but the earlier events stay in the calendar.
        created = []
        for occurrence in occurrences:
            if (occurrence.date, occurrence.time) in existing:
                continue
            try:
                appointment = await self._create_for_class(
                    class_orm, occurrence.date, occurrence.time, occurrence.duration
                )
            except HTTPException:
                if created:
                    log.warning(
                        f"Generation for class {class_pk} aborted at {occurrence.date} {occurrence.time}; "
                        f"{len(created)} calendar event(s) already created will remain after rollback: "
                        f"{[a.meet_link for a in created]}"
                    )
                raise
            created.append(appointment)

        log.info(f"Generated {len(created)} of {len(occurrences)} occurrences for class {class_pk}.")
        return [appointment_models.AppointmentRead.model_validate(a) for a in created]

    async def record_attendance(
        self,
        appointment_pk: int,
        attendance_data: appointment_models.AttendanceUpdate,
        current_user: db_models.Users
    ) -> appointment_models.AppointmentRead:
        """
        Partially updates the attendance flags.
        Allowed for admins and the teacher of the appointment's class.
        """
        log.info(f"User {current_user.id} recording attendance for appointment {appointment_pk}.")
        authorize(current_user, [UserRole.ADMIN, UserRole.TEACHER], "record attendance")
        appointment = await self._get_appointment_internal(appointment_pk)

        if role_of(current_user) == UserRole.TEACHER and appointment.class_.teacher_id != current_user.id:
            log.warning(f"SECURITY: Teacher {current_user.id} tried to record attendance on appointment {appointment_pk} of another class.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to record attendance for this appointment."
            )

        for key, value in attendance_data.model_dump(exclude_unset=True).items():
            setattr(appointment, key, value)

        self.db.add(appointment)
        await self.db.flush()
        return appointment_models.AppointmentRead.model_validate(appointment)

    async def update_appointment(
        self,
        appointment_pk: int,
        update_data: appointment_models.AppointmentUpdate,
        current_user: db_models.Users
    ) -> appointment_models.AppointmentRead:
        """
        Updates notes, ratings, the assignment and the status.
        - Teacher (of the class): teacher_note, teacher_rating, assignment.
        - Student (on the roster): student_note, student_rating.
        - Admin: all of the above plus status.
        """
        log.info(f"User {current_user.id} attempting to update appointment {appointment_pk}.")
        appointment = await self._get_appointment_internal(appointment_pk)

        update_dict = update_data.model_dump(exclude_unset=True)
        if not update_dict:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

        role = role_of(current_user)
        if role == UserRole.ADMIN:
            allowed = TEACHER_FIELDS | STUDENT_FIELDS | {"status"}
        elif role == UserRole.TEACHER and appointment.class_.teacher_id == current_user.id:
            allowed = TEACHER_FIELDS
        elif role == UserRole.STUDENT and any(
            link.student_id == current_user.id for link in appointment.class_.class_students
        ):
            allowed = STUDENT_FIELDS
        else:
            allowed = set()

        forbidden = set(update_dict) - allowed
        if forbidden:
            log.warning(f"SECURITY: User {current_user.id} (Role: {current_user.role}) tried to set {sorted(forbidden)} on appointment {appointment_pk}.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to update these fields."
            )

        for key, value in update_dict.items():
            if key == "status":
                if value is None:
                    continue
                value = value.value
            setattr(appointment, key, value)

        self.db.add(appointment)
        await self.db.flush()
        return appointment_models.AppointmentRead.model_validate(appointment)
