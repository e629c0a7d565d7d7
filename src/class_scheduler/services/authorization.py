'''
Role checks shared by the services.
'''
from fastapi import HTTPException, status

from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import UserRole


def role_of(user: db_models.Users) -> UserRole:
    """Returns the caller's role as the closed UserRole enum."""
    return UserRole(user.role)


def authorize(current_user: db_models.Users, allowed_roles: list[UserRole], action: str = "perform this action"):
    """Raises 403 unless the caller's role is one of allowed_roles."""
    if role_of(current_user) not in allowed_roles:
        allowed = [role.value for role in allowed_roles]
        log.warning(f"Unauthorized attempt to {action} by user {current_user.id} (Role: {current_user.role}). Required one of: {allowed}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You do not have permission to {action}."
        )


def authorize_admin(current_user: db_models.Users, action: str = "perform this action"):
    authorize(current_user, [UserRole.ADMIN], action)
