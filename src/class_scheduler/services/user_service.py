'''

'''
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..common.logger import log
from ..models import user as user_models
from ..common.security_utils import HashedPassword
from .authorization import authorize_admin, role_of


class UserService:
    """
    Service for user accounts: lookup, registration, profile updates and
    the admin user-management actions.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Lookups ---

    async def get_user_by_username(self, username: str) -> db_models.Users | None:
        """Fetches a user (password hash included) by username."""
        log.info(f"Fetching user profile for username: {username}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.username == username)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by username {username}: {e}", exc_info=True)
            raise

    async def get_user_by_id(self, user_id: int) -> db_models.Users | None:
        log.info(f"Fetching user profile for ID: {user_id}")
        try:
            return await self.db.get(db_models.Users, user_id)
        except Exception as e:
            log.error(f"Database error fetching user by ID {user_id}: {e}", exc_info=True)
            raise

    async def get_users_by_ids(self, user_ids: list[int]) -> list[db_models.Users]:
        """Fetches a batch of users by id. Missing ids are simply absent."""
        if not user_ids:
            return []
        log.info(f"Fetching {len(user_ids)} user profiles by ID list.")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.id.in_(user_ids))
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            log.error(f"Database error fetching users by ID list: {e}", exc_info=True)
            raise

    async def _get_user_or_404(self, user_id: int) -> db_models.Users:
        user = await self.get_user_by_id(user_id)
        if not user:
            log.warning(f"Tried to fetch non-existing user: {user_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        return user

    # --- Registration & Profile ---

    async def create_user(
        self,
        user_data: user_models.UserCreate,
        current_user: db_models.Users | None
    ) -> user_models.UserRead:
        """
        Registers a new user.
        - Anyone may register a student.
        - Teachers and admins can only be created by an admin.
        - Username must be unique; the password is hashed.
        """
        log.info(f"Attempting to register {user_data.role.value} '{user_data.username}'.")

        # 1. Authorization
        if user_data.role != UserRole.STUDENT:
            if current_user is None:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Only an administrator can create teacher or admin accounts."
                )
            authorize_admin(current_user, f"create {user_data.role.value} accounts")

        # 2. Check for existing user
        existing_user = await self.get_user_by_username(user_data.username)
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already registered."
            )

        # 3. Create the ORM object
        new_user = db_models.Users(
            username=user_data.username,
            password=HashedPassword.get_hash(user_data.password),
            role=user_data.role.value,
            name=user_data.name,
            date_of_birth=user_data.date_of_birth,
            nationality=user_data.nationality,
            location=user_data.location,
            base_salary_per_hour=user_data.base_salary_per_hour,
            base_payment_per_hour=user_data.base_payment_per_hour,
            balance=Decimal("0"),
            payment_history=[],
            is_active=True,
        )
        self.db.add(new_user)
        await self.db.flush()

        log.info(f"Registered user {new_user.id} ('{new_user.username}').")
        return user_models.UserRead.model_validate(new_user)

    async def update_profile(
        self,
        update_data: user_models.ProfileUpdate,
        current_user: db_models.Users
    ) -> user_models.UserRead:
        """
        Updates the caller's own profile. Partial; hashes a new password.
        """
        log.info(f"User {current_user.id} attempting to update their profile.")

        update_dict = update_data.model_dump(exclude_unset=True)
        if not update_dict:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

        for key, value in update_dict.items():
            if key == "password":
                setattr(current_user, key, HashedPassword.get_hash(value))
            elif key == "name" and value is None:
                continue # name is NOT NULL
            else:
                setattr(current_user, key, value)

        self.db.add(current_user)
        await self.db.flush()
        return user_models.UserRead.model_validate(current_user)

    # --- Admin Actions ---

    async def get_all(self, current_user: db_models.Users) -> list[user_models.UserRead]:
        """
        Lists teacher and student accounts, ordered by name.
        Restricted to admins.
        """
        log.info(f"User {current_user.id} (Role: {current_user.role}) requesting the user list.")
        authorize_admin(current_user, "list users")
        try:
            stmt = select(db_models.Users).filter(
                db_models.Users.role.in_([UserRole.TEACHER.value, UserRole.STUDENT.value])
            ).order_by(db_models.Users.name, db_models.Users.id)
            result = await self.db.execute(stmt)
            return [user_models.UserRead.model_validate(user) for user in result.scalars().all()]
        except Exception as e:
            log.error(f"Database error listing users for admin {current_user.id}: {e}", exc_info=True)
            raise

    async def update_user(
        self,
        user_id: int,
        update_data: user_models.UserAdminUpdate,
        current_user: db_models.Users
    ) -> user_models.UserRead:
        """
        Admin update of name, hourly rates and the active flag.
        The role is never changed here.
        """
        log.info(f"User {current_user.id} attempting to update user {user_id}.")
        authorize_admin(current_user, "update users")

        user_to_update = await self._get_user_or_404(user_id)

        update_dict = update_data.model_dump(exclude_unset=True)
        if not update_dict:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

        for key, value in update_dict.items():
            if key in ("name", "is_active") and value is None:
                continue
            setattr(user_to_update, key, value)

        self.db.add(user_to_update)
        await self.db.flush()
        return user_models.UserRead.model_validate(user_to_update)

    async def record_payment(
        self,
        user_id: int,
        payment_data: user_models.PaymentCreate,
        current_user: db_models.Users
    ) -> user_models.UserRead:
        """
        Appends a transaction to the user's payment history and applies its
        amount to the running balance. Restricted to admins.
        """
        log.info(f"User {current_user.id} recording a payment of {payment_data.amount} for user {user_id}.")
        authorize_admin(current_user, "record payments")

        user = await self._get_user_or_404(user_id)
        if role_of(user) == UserRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payments can only be recorded for teachers and students."
            )

        record = user_models.PaymentRecord(
            amount=str(payment_data.amount),
            note=payment_data.note,
            recorded_at=datetime.now(timezone.utc),
        )
        # Reassign (not append) so the JSON column is flagged as changed
        user.payment_history = [*(user.payment_history or []), record.model_dump(mode="json", by_alias=True)]
        user.balance = (user.balance or Decimal("0")) + payment_data.amount

        self.db.add(user)
        await self.db.flush()
        return user_models.UserRead.model_validate(user)
