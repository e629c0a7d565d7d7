import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from class_scheduler.database import models as db_models
from class_scheduler.models import subject as subject_models
from class_scheduler.services.subject_service import SubjectService


@pytest.mark.anyio
class TestSubjectService:

    async def test_create_subject_from_form_text(
        self,
        subject_service: SubjectService,
        test_admin: db_models.Users
    ):
        """Free-text durations and prices are parsed into structured values."""
        subject_data = subject_models.SubjectCreate(
            name="Algebra",
            sessions_per_week=2,
            durations="60,90",
            price_per_duration='"60": 40, "90": 55'
        )
        subject = await subject_service.create_subject(subject_data, test_admin)

        assert subject.id is not None
        assert subject.name == "Algebra"
        assert subject.durations == [60, 90]
        assert subject.price_per_duration == {"60": 40, "90": 55}
        assert subject.is_active is True

    async def test_create_subject_with_structured_values(
        self,
        subject_service: SubjectService,
        test_admin: db_models.Users
    ):
        subject_data = subject_models.SubjectCreate(
            name="Physics",
            sessions_per_week=1,
            durations=[45],
            price_per_duration={"45": 30.5},
            is_active=False
        )
        subject = await subject_service.create_subject(subject_data, test_admin)

        assert subject.durations == [45]
        assert subject.price_per_duration == {"45": 30.5}
        assert subject.is_active is False

    async def test_create_subject_forbidden_for_non_admin(
        self,
        db_session: AsyncSession,
        subject_service: SubjectService,
        test_teacher: db_models.Users,
        test_student: db_models.Users
    ):
        subject_data = subject_models.SubjectCreate(name="Algebra", sessions_per_week=2)
        for caller in (test_teacher, test_student):
            with pytest.raises(HTTPException) as e:
                await subject_service.create_subject(subject_data, caller)
            assert e.value.status_code == 403

        count = await db_session.scalar(select(func.count()).select_from(db_models.Subjects))
        assert count == 0

    @pytest.mark.parametrize("payload", [
        {"name": "", "sessions_per_week": 2},
        {"name": "   ", "sessions_per_week": 2},
        {"name": "Algebra", "sessions_per_week": 0},
        {"name": "Algebra"},
    ])
    async def test_invalid_subject_input_is_rejected(self, payload):
        with pytest.raises(ValidationError):
            subject_models.SubjectCreate(**payload)

    async def test_structured_prices_must_be_positive(self):
        with pytest.raises(ValidationError):
            subject_models.SubjectCreate(name="Algebra", sessions_per_week=2, price_per_duration={"60": -1})

    async def test_get_all_is_open_to_any_user(
        self,
        subject_service: SubjectService,
        test_subject: db_models.Subjects,
        test_student: db_models.Users
    ):
        subjects = await subject_service.get_all(test_student)
        assert [s.id for s in subjects] == [test_subject.id]

    async def test_update_subject_replaces_fields(
        self,
        subject_service: SubjectService,
        test_subject: db_models.Subjects,
        test_admin: db_models.Users
    ):
        update_data = subject_models.SubjectUpdate(
            name="Advanced Algebra",
            sessions_per_week=3,
            durations="120",
            price_per_duration='"120": 100',
            is_active=False
        )
        subject = await subject_service.update_subject(test_subject.id, update_data, test_admin)

        assert subject.id == test_subject.id
        assert subject.name == "Advanced Algebra"
        assert subject.sessions_per_week == 3
        assert subject.durations == [120]
        assert subject.price_per_duration == {"120": 100}
        assert subject.is_active is False

    async def test_update_subject_not_found(
        self,
        subject_service: SubjectService,
        test_admin: db_models.Users
    ):
        update_data = subject_models.SubjectUpdate(name="Ghost", sessions_per_week=1)
        with pytest.raises(HTTPException) as e:
            await subject_service.update_subject(9999, update_data, test_admin)
        assert e.value.status_code == 404

    async def test_update_subject_forbidden_for_teacher(
        self,
        subject_service: SubjectService,
        test_subject: db_models.Subjects,
        test_teacher: db_models.Users
    ):
        update_data = subject_models.SubjectUpdate(name="Hacked", sessions_per_week=1)
        with pytest.raises(HTTPException) as e:
            await subject_service.update_subject(test_subject.id, update_data, test_teacher)
        assert e.value.status_code == 403
