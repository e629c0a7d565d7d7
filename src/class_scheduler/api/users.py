'''
API endpoints for the admin user-management actions.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import user as user_models
from ..services.security import verify_token_and_get_user
from ..services.user_service import UserService


class UsersAPI:
    """Admin-only endpoints over teacher and student accounts."""
    def __init__(self):
        self.router = APIRouter(
                prefix="/api/users",
                tags=["Users"])
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "",
                self.get_all,
                methods=["GET"],
                response_model=list[user_models.UserRead])
        self.router.add_api_route(
                "/{user_id}",
                self.update,
                methods=["PATCH"],
                response_model=user_models.UserRead)
        self.router.add_api_route(
                "/{user_id}/payments",
                self.record_payment,
                methods=["POST"],
                response_model=user_models.UserRead)

    async def get_all(self, current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)], user_service: Annotated[UserService, Depends(UserService)]):
        return await user_service.get_all(current_user)

    async def update(self, user_id: int, update_data: user_models.UserAdminUpdate, current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)], user_service: Annotated[UserService, Depends(UserService)]):
        return await user_service.update_user(user_id, update_data, current_user)

    async def record_payment(
        self,
        user_id: int,
        payment_data: user_models.PaymentCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        """
        Appends a transaction to the user's payment history and updates the balance.
        """
        return await user_service.record_payment(user_id, payment_data, current_user)


users_api = UsersAPI()
router = users_api.router
