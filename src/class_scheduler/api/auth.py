'''
API endpoints for Authentication: login, logout, registration and the
caller's own profile.
'''
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from ..database import models as db_models
from ..services.auth_service import LoginService
from ..services.security import get_optional_user, verify_token_and_get_user
from ..services.user_service import UserService
from ..models import token as token_models
from ..models import user as user_models
from ..common.logger import log

class AuthRoutes:
    """
    A class to encapsulate all authentication and account endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api",
            tags=["Authentication"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/login",
            self.login_for_access_token,
            methods=["POST"],
            response_model=token_models.Token,
            summary="Login for Access Token"
        )
        self.router.add_api_route(
            "/logout",
            self.logout,
            methods=["POST"],
            summary="Logout"
        )
        self.router.add_api_route(
            "/register",
            self.register,
            methods=["POST"],
            response_model=user_models.UserRead,
            summary="Register a User"
        )
        self.router.add_api_route(
            "/user",
            self.read_current_user,
            methods=["GET"],
            response_model=user_models.UserRead
        )
        self.router.add_api_route(
            "/user/profile",
            self.update_profile,
            methods=["PUT"],
            response_model=user_models.UserRead
        )

    async def login_for_access_token(
        self,
        form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
        login_service: Annotated[LoginService, Depends(LoginService)]
    ):
        """
        Authenticates a user and returns an access token.
        Uses OAuth2PasswordRequestForm (username & password fields).
        """
        try:
            token = await login_service.login_user(form_data)
            return token
        except HTTPException as e:
            raise e
        except Exception as e:
            log.error(f"Unexpected error during login: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An internal server error occurred during login.",
            )

    async def logout(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)]
    ):
        """
        Tokens are stateless; the client discards its token.
        """
        log.info(f"User {current_user.id} logged out.")
        return {"message": "Logged out successfully."}

    async def register(
        self,
        user_data: user_models.UserCreate,
        current_user: Annotated[Optional[db_models.Users], Depends(get_optional_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        """
        Creates a new user. Students may self-register; teacher and admin
        accounts require an admin bearer token.
        """
        return await user_service.create_user(user_data, current_user)

    async def read_current_user(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)]
    ):
        """
        Returns the profile information for the currently authenticated user.
        """
        return current_user

    async def update_profile(
        self,
        update_data: user_models.ProfileUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        return await user_service.update_profile(update_data, current_user)

# Create an instance of the class and export its router
auth_routes = AuthRoutes()
router = auth_routes.router
