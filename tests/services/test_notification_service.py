import pytest
import datetime
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from class_scheduler.database import models as db_models
from class_scheduler.services.notification_service import NotificationService
from tests import factories


@pytest.mark.anyio
class TestNotificationService:

    async def test_get_all_newest_first_and_only_own(
        self,
        db_session: AsyncSession,
        notification_service: NotificationService,
        test_student: db_models.Users,
        test_second_student: db_models.Users
    ):
        now = datetime.datetime.now(datetime.timezone.utc)
        older = factories.NotificationFactory.create(user=test_student, created_at=now - datetime.timedelta(days=1))
        newer = factories.NotificationFactory.create(user=test_student, created_at=now)
        factories.NotificationFactory.create(user=test_second_student, created_at=now)
        await db_session.commit()

        notifications = await notification_service.get_all(test_student)
        assert [n.id for n in notifications] == [newer.id, older.id]

    async def test_mark_read_is_idempotent(
        self,
        db_session: AsyncSession,
        notification_service: NotificationService,
        test_student: db_models.Users
    ):
        notification = factories.NotificationFactory.create(user=test_student)
        await db_session.commit()

        first = await notification_service.mark_read(notification.id, test_student)
        second = await notification_service.mark_read(notification.id, test_student)

        assert first.read is True
        assert second.read is True

    async def test_mark_read_of_someone_elses_notification(
        self,
        db_session: AsyncSession,
        notification_service: NotificationService,
        test_student: db_models.Users,
        test_second_student: db_models.Users
    ):
        notification = factories.NotificationFactory.create(user=test_second_student)
        await db_session.commit()

        with pytest.raises(HTTPException) as e:
            await notification_service.mark_read(notification.id, test_student)
        assert e.value.status_code == 404
        assert notification.read is False

    async def test_mark_read_not_found(
        self,
        notification_service: NotificationService,
        test_student: db_models.Users
    ):
        with pytest.raises(HTTPException) as e:
            await notification_service.mark_read(9999, test_student)
        assert e.value.status_code == 404

    async def test_notify_appointment_created(
        self,
        db_session: AsyncSession,
        notification_service: NotificationService,
        test_class: db_models.Classes,
        test_teacher: db_models.Users,
        test_student: db_models.Users
    ):
        appointment = factories.AppointmentFactory.create(
            class_=test_class, date=datetime.date(2024, 1, 15), time="10:30"
        )
        await db_session.flush()

        notifications = await notification_service.notify_appointment_created(
            appointment, [test_teacher.id, test_student.id, test_student.id], "Algebra"
        )

        assert [n.user_id for n in notifications] == [test_teacher.id, test_student.id]
        for n in notifications:
            assert n.related_appointment_id == appointment.id
            assert n.title == "New Class Scheduled"
            assert n.message == "A new Algebra class has been scheduled for 2024-01-15 at 10:30."
            assert n.scheduled_for == datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
