from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from ..database.db_enums import UserRole
from .base import ApiModel


# --- User API Read Models ---

class UserRead(ApiModel):
    """
    Pydantic model for reading user data.
    Corresponds to the db_models.Users ORM model (password excluded).
    """
    id: int
    username: str
    role: UserRole
    name: str
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    location: Optional[str] = None
    balance: Decimal = Decimal("0")
    base_salary_per_hour: Optional[Decimal] = None
    base_payment_per_hour: Optional[Decimal] = None
    payment_history: list[dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("balance", mode="before")
    @classmethod
    def default_balance(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value


class UserSummaryRead(ApiModel):
    """Lean id + name pair used inside class rosters."""
    id: int
    name: str


# --- User API Write Models ---

class UserCreate(ApiModel):
    """
    Pydantic model for validating the registration payload.
    Teachers and admins can only be created by an admin.
    """
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: UserRole = UserRole.STUDENT
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    location: Optional[str] = None
    base_salary_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    base_payment_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class ProfileUpdate(ApiModel):
    """
    Fields a user may change on their own profile.
    All optional for partial updates.
    """
    name: Optional[str] = Field(None, min_length=1)
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    location: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)


class UserAdminUpdate(ApiModel):
    """
    Fields an admin may change on any user. The role is not updatable:
    it is fixed at creation.
    """
    name: Optional[str] = Field(None, min_length=1)
    base_salary_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    base_payment_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    is_active: Optional[bool] = None


class PaymentCreate(ApiModel):
    """A transaction to append to a user's payment history."""
    amount: Decimal = Field(..., decimal_places=2)
    note: Optional[str] = None


class PaymentRecord(ApiModel):
    """One entry of Users.payment_history as stored in JSON."""
    amount: str
    note: Optional[str] = None
    recorded_at: datetime
