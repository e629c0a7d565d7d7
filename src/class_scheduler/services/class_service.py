'''

'''
import secrets
from typing import Annotated, Any
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..models import classes as class_models
from ..models import user as user_models
from ..models.appointment import AppointmentRead
from ..common.logger import log
from .authorization import authorize_admin, role_of
from .user_service import UserService


def generate_class_id() -> str:
    """Human-readable class identifier, e.g. CLS-3F9A1C2B."""
    return f"CLS-{secrets.token_hex(4).upper()}"


class ClassService:
    """
    Service for classes: a subject taught by one teacher to a roster of
    students on a weekly recurrence pattern.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    # --- Internal Fetchers ---

    def _detail_options(self) -> list[Any]:
        return [
            selectinload(db_models.Classes.subject),
            selectinload(db_models.Classes.teacher),
            selectinload(db_models.Classes.class_students).selectinload(db_models.ClassStudents.student),
            selectinload(db_models.Classes.appointments),
        ]

    async def get_class_internal(self, class_pk: int) -> db_models.Classes:
        """
        Fetches a class with its subject, teacher, roster and appointments.
        Raises 404 if not found.
        """
        log.info(f"Internal fetch for class by ID: {class_pk}")
        stmt = select(db_models.Classes).options(*self._detail_options()).filter(
            db_models.Classes.id == class_pk
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        class_orm = result.scalars().first()
        if not class_orm:
            log.warning(f"Tried to fetch non-existing class: {class_pk}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found.")
        return class_orm

    async def get_visible_class_ids(self, current_user: db_models.Users) -> list[int]:
        """
        Ids of the classes the caller may see:
        - Admin: every class.
        - Teacher: the classes they teach.
        - Student: the classes whose roster contains them.
        """
        role = role_of(current_user)
        if role == UserRole.ADMIN:
            stmt = select(db_models.Classes.id)
        elif role == UserRole.TEACHER:
            stmt = select(db_models.Classes.id).filter(db_models.Classes.teacher_id == current_user.id)
        else:
            stmt = select(db_models.ClassStudents.class_id).filter(
                db_models.ClassStudents.student_id == current_user.id
            )
        result = await self.db.execute(stmt)
        return list(dict.fromkeys(result.scalars().all()))

    # --- Formatting ---

    @staticmethod
    def _read_models_for(current_user: db_models.Users) -> tuple[type, type]:
        """
        (summary model, detail model) for the caller's role.
        Students never see admin notes or prices; teachers only see their own pay.
        """
        role = role_of(current_user)
        if role == UserRole.ADMIN:
            return class_models.ClassReadForAdmin, class_models.ClassDetailRead
        if role == UserRole.TEACHER:
            return class_models.ClassReadForTeacher, class_models.ClassDetailForTeacher
        return class_models.ClassRead, class_models.ClassDetailForStudent

    def to_detail(
        self,
        class_orm: db_models.Classes,
        current_user: db_models.Users
    ) -> class_models.ClassDetailRoleBased:
        """Builds the enriched view of a fully loaded class for the caller's role."""
        read_model, detail_model = self._read_models_for(current_user)
        appointments = sorted(class_orm.appointments, key=lambda a: (a.date, a.time))
        return detail_model(
            **read_model.model_validate(class_orm).model_dump(),
            subject_name=class_orm.subject.name if class_orm.subject else None,
            teacher_name=class_orm.teacher.name if class_orm.teacher else None,
            students=[
                user_models.UserSummaryRead.model_validate(link.student)
                for link in class_orm.class_students
            ],
            appointments=[AppointmentRead.model_validate(a) for a in appointments],
        )

    def _authorize_read_access(self, class_orm: db_models.Classes, current_user: db_models.Users):
        """Admins, the class teacher and rostered students may read a class."""
        role = role_of(current_user)
        if role == UserRole.ADMIN:
            return
        if role == UserRole.TEACHER and class_orm.teacher_id == current_user.id:
            return
        if role == UserRole.STUDENT and any(
            link.student_id == current_user.id for link in class_orm.class_students
        ):
            return
        log.warning(f"SECURITY: User {current_user.id} tried to read class {class_orm.id} without permission.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to view this class."
        )

    # --- Public Read Methods (API-Facing) ---

    async def get_all(self, current_user: db_models.Users) -> list[class_models.ClassReadRoleBased]:
        """
        Lists the caller's classes. Admins get every class enriched with
        subject name, teacher name, roster and appointments.
        """
        log.info(f"User {current_user.id} (Role: {current_user.role}) requesting class list.")
        try:
            role = role_of(current_user)
            if role == UserRole.ADMIN:
                stmt = select(db_models.Classes).options(*self._detail_options()).order_by(db_models.Classes.id)
                result = await self.db.execute(stmt)
                return [self.to_detail(c, current_user) for c in result.scalars().all()]

            class_ids = await self.get_visible_class_ids(current_user)
            if not class_ids:
                return []
            stmt = select(db_models.Classes).filter(
                db_models.Classes.id.in_(class_ids)
            ).order_by(db_models.Classes.id)
            result = await self.db.execute(stmt)
            read_model, _ = self._read_models_for(current_user)
            return [read_model.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            log.error(f"Error listing classes for user {current_user.id}: {e}", exc_info=True)
            raise

    async def get_class(self, class_pk: int, current_user: db_models.Users) -> class_models.ClassDetailRoleBased:
        log.info(f"User {current_user.id} requesting class {class_pk}.")
        class_orm = await self.get_class_internal(class_pk)
        self._authorize_read_access(class_orm, current_user)
        return self.to_detail(class_orm, current_user)

    # --- Public Write Methods (API-Facing) ---

    async def _validate_participants(self, class_data: class_models.ClassCreate) -> list[int]:
        """
        Checks the subject, the teacher and every student exist with the
        right role. Returns the distinct student ids in input order.
        """
        subject = await self.db.get(db_models.Subjects, class_data.subject_id)
        if not subject:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found.")

        teacher = await self.user_service.get_user_by_id(class_data.teacher_id)
        if not teacher or teacher.role != UserRole.TEACHER.value:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found.")

        student_ids = list(dict.fromkeys(class_data.student_ids))
        students = await self.user_service.get_users_by_ids(student_ids)
        found = {s.id for s in students if s.role == UserRole.STUDENT.value}
        missing = [sid for sid in student_ids if sid not in found]
        if missing:
            log.warning(f"Class creation referenced unknown students: {missing}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Students not found: {', '.join(str(sid) for sid in missing)}"
            )
        return student_ids

    async def create_class(
        self,
        class_data: class_models.ClassCreate,
        current_user: db_models.Users
    ) -> class_models.ClassDetailRead:
        """
        Creates a class and its roster in the request's transaction.
        Restricted to admins.
        """
        log.info(f"User {current_user.id} attempting to create a class for subject {class_data.subject_id}.")
        authorize_admin(current_user, "create classes")

        try:
            student_ids = await self._validate_participants(class_data)

            new_class = db_models.Classes(
                class_id=generate_class_id(),
                subject_id=class_data.subject_id,
                teacher_id=class_data.teacher_id,
                start_date=class_data.start_date,
                end_date=class_data.end_date,
                # enum keys -> plain strings, declared order kept
                week_days=[day.value for day in class_data.week_days],
                time_per_day={day.value: hhmm for day, hhmm in class_data.time_per_day.items()},
                duration_per_day={day.value: minutes for day, minutes in class_data.duration_per_day.items()},
                custom_hour_price=class_data.custom_hour_price,
                custom_teacher_salary=class_data.custom_teacher_salary,
                admin_notes=class_data.admin_notes,
                teacher_notes=class_data.teacher_notes,
                is_active=True,
            )
            new_class.class_students = [
                db_models.ClassStudents(student_id=student_id) for student_id in student_ids
            ]
            self.db.add(new_class)
            await self.db.flush()

            log.info(f"Created class {new_class.id} ({new_class.class_id}) with {len(student_ids)} students.")
            return self.to_detail(await self.get_class_internal(new_class.id), current_user)
        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error creating class for subject {class_data.subject_id}: {e}", exc_info=True)
            raise

    async def update_class(
        self,
        class_pk: int,
        update_data: class_models.ClassUpdate,
        current_user: db_models.Users
    ) -> class_models.ClassDetailRoleBased:
        """
        Admins may change the end date, notes, custom prices and the
        active flag. The class teacher may only change teacher_notes.
        """
        log.info(f"User {current_user.id} attempting to update class {class_pk}.")
        class_orm = await self.get_class_internal(class_pk)

        update_dict = update_data.model_dump(exclude_unset=True)
        if not update_dict:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

        role = role_of(current_user)
        if role == UserRole.TEACHER and class_orm.teacher_id == current_user.id:
            forbidden = set(update_dict) - {"teacher_notes"}
            if forbidden:
                log.warning(f"SECURITY: Teacher {current_user.id} tried to update {sorted(forbidden)} on class {class_pk}.")
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Teachers may only update their own notes."
                )
        else:
            authorize_admin(current_user, "update classes")

        new_end = update_dict.get("end_date", class_orm.end_date)
        if new_end is None or new_end < class_orm.start_date:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date cannot be before start_date.")

        for key, value in update_dict.items():
            if key == "is_active" and value is None:
                continue
            setattr(class_orm, key, value)

        self.db.add(class_orm)
        await self.db.flush()
        return self.to_detail(class_orm, current_user)
