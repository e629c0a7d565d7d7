'''

'''
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import subject as subject_models
from ..common.logger import log
from .authorization import authorize_admin


class SubjectService:
    """
    Service for the subject catalog. Reading is open to every
    authenticated user; writing is restricted to admins.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_all(self, current_user: db_models.Users) -> list[subject_models.SubjectRead]:
        log.info(f"User {current_user.id} requesting the subject catalog.")
        try:
            stmt = select(db_models.Subjects).order_by(db_models.Subjects.id)
            result = await self.db.execute(stmt)
            return [subject_models.SubjectRead.model_validate(s) for s in result.scalars().all()]
        except Exception as e:
            log.error(f"Database error fetching subjects: {e}", exc_info=True)
            raise

    async def create_subject(
        self,
        subject_data: subject_models.SubjectCreate,
        current_user: db_models.Users
    ) -> subject_models.SubjectRead:
        """
        Creates a subject. Free-text durations and prices have already been
        normalized by the input model.
        """
        log.info(f"User {current_user.id} attempting to create subject '{subject_data.name}'.")
        authorize_admin(current_user, "create subjects")

        try:
            new_subject = db_models.Subjects(**subject_data.model_dump())
            self.db.add(new_subject)
            await self.db.flush()
            log.info(f"Created subject {new_subject.id} ('{new_subject.name}').")
            return subject_models.SubjectRead.model_validate(new_subject)
        except Exception as e:
            log.error(f"Error creating subject '{subject_data.name}': {e}", exc_info=True)
            raise

    async def update_subject(
        self,
        subject_id: int,
        subject_data: subject_models.SubjectUpdate,
        current_user: db_models.Users
    ) -> subject_models.SubjectRead:
        """Replaces every editable field of an existing subject."""
        log.info(f"User {current_user.id} attempting to update subject {subject_id}.")
        authorize_admin(current_user, "update subjects")

        subject = await self.db.get(db_models.Subjects, subject_id)
        if not subject:
            log.warning(f"Tried to update non-existing subject: {subject_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found.")

        for key, value in subject_data.model_dump().items():
            setattr(subject, key, value)

        self.db.add(subject)
        await self.db.flush()
        return subject_models.SubjectRead.model_validate(subject)
