'''
API endpoints for the caller's notifications.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import notification as notification_models
from ..services.security import verify_token_and_get_user
from ..services.notification_service import NotificationService


class NotificationsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/notifications",
            tags=["Notifications"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "",
                self.list_notifications,
                methods=["GET"],
                response_model=list[notification_models.NotificationRead])
        self.router.add_api_route(
                "/{notification_id}/read",
                self.mark_read,
                methods=["POST"],
                response_model=notification_models.NotificationRead)

    async def list_notifications(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        notification_service: Annotated[NotificationService, Depends(NotificationService)]
    ):
        """
        Retrieves the current user's notifications, newest first.
        """
        return await notification_service.get_all(current_user)

    async def mark_read(
        self,
        notification_id: int,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        notification_service: Annotated[NotificationService, Depends(NotificationService)]
    ):
        return await notification_service.mark_read(notification_id, current_user)


notifications_api = NotificationsAPI()
router = notifications_api.router
