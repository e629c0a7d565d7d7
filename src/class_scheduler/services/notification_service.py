'''

'''
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import NotificationTypeEnum
from ..models import notification as notification_models
from ..core.recurrence import session_start
from ..common.logger import log

NEW_CLASS_TITLE = "New Class Scheduled"


class NotificationService:
    """
    Service for per-user notifications.
    A user only ever sees and updates their own notifications.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_all(self, current_user: db_models.Users) -> list[notification_models.NotificationRead]:
        """Returns the caller's notifications, newest first."""
        log.info(f"Fetching notifications for user {current_user.id}.")
        try:
            stmt = select(db_models.Notifications).filter(
                db_models.Notifications.user_id == current_user.id
            ).order_by(
                db_models.Notifications.created_at.desc(),
                db_models.Notifications.id.desc()
            )
            result = await self.db.execute(stmt)
            return [notification_models.NotificationRead.model_validate(n) for n in result.scalars().all()]
        except Exception as e:
            log.error(f"Database error fetching notifications for user {current_user.id}: {e}", exc_info=True)
            raise

    async def mark_read(self, notification_id: int, current_user: db_models.Users) -> notification_models.NotificationRead:
        """
        Marks one of the caller's notifications as read.
        Someone else's notification is indistinguishable from a missing one.
        """
        log.info(f"User {current_user.id} marking notification {notification_id} as read.")
        stmt = select(db_models.Notifications).filter(
            db_models.Notifications.id == notification_id,
            db_models.Notifications.user_id == current_user.id
        )
        result = await self.db.execute(stmt)
        notification = result.scalars().first()
        if not notification:
            log.warning(f"Notification {notification_id} not found for user {current_user.id}.")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found.")

        notification.read = True
        self.db.add(notification)
        await self.db.flush()
        return notification_models.NotificationRead.model_validate(notification)

    async def notify_appointment_created(
        self,
        appointment: db_models.Appointments,
        recipient_ids: list[int],
        subject_name: str
    ) -> list[db_models.Notifications]:
        """
        Adds one `upcoming_class` notification per recipient for a freshly
        created appointment. Runs inside the caller's transaction.
        """
        log.info(f"Notifying {len(recipient_ids)} users about appointment {appointment.appointment_id}.")
        message = f"A new {subject_name} class has been scheduled for {appointment.date.isoformat()} at {appointment.time}."
        scheduled_for = session_start(appointment.date, appointment.time)

        notifications = [
            db_models.Notifications(
                user_id=user_id,
                type=NotificationTypeEnum.UPCOMING_CLASS.value,
                title=NEW_CLASS_TITLE,
                message=message,
                read=False,
                scheduled_for=scheduled_for,
                related_appointment_id=appointment.id,
            )
            for user_id in dict.fromkeys(recipient_ids)
        ]
        self.db.add_all(notifications)
        await self.db.flush()
        return notifications
