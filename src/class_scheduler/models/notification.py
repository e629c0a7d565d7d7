from datetime import datetime
from typing import Optional

from ..database.db_enums import NotificationTypeEnum
from .base import ApiModel


class NotificationRead(ApiModel):
    """
    Pydantic model for formatting a notification when READING it from the API.
    """
    id: int
    user_id: int
    type: NotificationTypeEnum
    title: str
    message: str
    read: bool
    created_at: datetime
    scheduled_for: Optional[datetime] = None
    related_appointment_id: Optional[int] = None
