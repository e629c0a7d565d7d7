'''
Pydantic models for the subject catalog.
'''
from typing import Any, Union

from pydantic import Field, PositiveFloat, PositiveInt, field_validator

from ..core.parsing import parse_durations, parse_price_map
from .base import ApiModel


class SubjectBase(ApiModel):
    """
    Common subject fields. `durations` and `price_per_duration` may arrive
    either structured or as the free text typed into the admin form.
    """
    name: str = Field(..., min_length=1)
    sessions_per_week: int = Field(..., ge=1)
    durations: list[PositiveInt] = Field(default_factory=list)
    price_per_duration: dict[str, Union[PositiveInt, PositiveFloat]] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value

    @field_validator("durations", mode="before")
    @classmethod
    def parse_duration_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_durations(value)
        return value

    @field_validator("price_per_duration", mode="before")
    @classmethod
    def parse_price_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_price_map(value)
        return value


class SubjectCreate(SubjectBase):
    """Payload for POST /api/subjects."""
    is_active: bool = True


class SubjectUpdate(SubjectBase):
    """Payload for PUT /api/subjects/{id}: a full replace."""
    is_active: bool = True


class SubjectRead(ApiModel):
    id: int
    name: str
    sessions_per_week: int
    durations: list[int]
    price_per_duration: dict[str, Union[int, float]]
    is_active: bool
